"""Shared fixtures for extraction and scheduling tests."""
from __future__ import annotations

import uuid
from typing import Any

import pytest

from scheduler import StoreError


class InMemoryRecordStore:
	"""Record store keeping rows in per-table lists."""

	def __init__(self) -> None:
		self.tables: dict[str, list[dict[str, Any]]] = {}
		self.fail_with: Exception | None = None
		self.calls: list[tuple[str, str]] = []

	async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any] | None:
		self.calls.append(("insert", table))
		if self.fail_with is not None:
			raise self.fail_with
		row = {"id": str(uuid.uuid4()), **record}
		self.tables.setdefault(table, []).append(row)
		return dict(row)

	async def update(self, table: str, values: dict[str, Any], match: dict[str, Any]) -> list[dict[str, Any]]:
		self.calls.append(("update", table))
		if self.fail_with is not None:
			raise self.fail_with
		updated = []
		for row in self.tables.get(table, []):
			if all(row.get(column) == value for column, value in match.items()):
				row.update(values)
				updated.append(dict(row))
		return updated

	def rows(self, table: str = "todos") -> list[dict[str, Any]]:
		return self.tables.get(table, [])


@pytest.fixture
def store() -> InMemoryRecordStore:
	"""Empty in-memory record store."""
	return InMemoryRecordStore()


@pytest.fixture
def permission_error() -> StoreError:
	"""Store error shaped like a row-level security rejection."""
	return StoreError("PGRST301", "permission denied for table todos")
