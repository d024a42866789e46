"""Supabase-backed record store for review tasks."""


import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from config import SupabaseCredentials
from scheduler import Record, StoreError


class SupabaseRecordStore:
	"""Record store over the async Supabase client."""

	def __init__(self, client: AsyncClient) -> None:
		self._client = client
		self._logger = logging.getLogger(self.__class__.__name__)

	@classmethod
	async def connect(cls, credentials: SupabaseCredentials) -> "SupabaseRecordStore":
		"""Create a store with a fresh client for the configured project."""
		client = await acreate_client(credentials.url, credentials.key)
		return cls(client)

	async def insert(self, table: str, record: Record) -> Record | None:
		response = await self._execute(self._client.table(table).insert(record))
		rows = self._extract_list(response)
		return rows[0] if rows else None

	async def update(self, table: str, values: Record, match: Record) -> list[Record]:
		query = self._client.table(table).update(values)
		for column, value in match.items():
			query = query.eq(column, value)
		response = await self._execute(query)
		return self._extract_list(response)

	async def _execute(self, query: Any) -> Any:
		try:
			return await query.execute()
		except APIError as exc:
			self._logger.warning("Supabase API error %s: %s", exc.code, exc.message)
			raise StoreError(exc.code, exc.message or str(exc)) from exc
		except httpx.HTTPError as exc:
			self._logger.warning("Supabase transport error: %s", exc)
			raise StoreError("transport", str(exc)) from exc

	def _extract_list(self, response: Any) -> list[Record]:
		data = getattr(response, "data", None)
		if data and isinstance(data, list):
			return data
		return []
