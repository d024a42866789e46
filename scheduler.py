"""Review-task scheduling against an external record store."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Literal, Protocol

from schemas import ReviewTask

DEFAULT_TASK_TABLE = "todos"
DEFAULT_REVIEW_DELAY = timedelta(days=1)

Record = dict[str, Any]


class StoreError(Exception):
	"""Failure reported by the record store."""

	def __init__(self, code: str | None, message: str) -> None:
		super().__init__(f"[{code}] {message}" if code else message)
		self.code = code
		self.message = message


class RecordStore(Protocol):
	"""The two record-store primitives the scheduler relies on."""

	async def insert(self, table: str, record: Record) -> Record | None:
		...

	async def update(self, table: str, values: Record, match: Record) -> list[Record]:
		...


@dataclass(frozen=True)
class ScheduleSuccess:
	record: Record | None = None
	success: Literal[True] = True


@dataclass(frozen=True)
class ScheduleFailure:
	error: Exception
	success: Literal[False] = False


ScheduleResult = ScheduleSuccess | ScheduleFailure


def _utc_now() -> datetime:
	return datetime.now(timezone.utc)


def review_title(archive_name: str) -> str:
	return f"{archive_name}_Review"


def review_description(archive_name: str) -> str:
	return f'Q&A card review for archive "{archive_name}"'


@dataclass
class ReviewScheduler:
	"""Creates review tasks and flips their completion flag.

	Every store failure is caught here, logged, and returned as a
	ScheduleFailure. Nothing is deduplicated and no existence check is made
	before an update.
	"""

	store: RecordStore
	table: str = DEFAULT_TASK_TABLE
	clock: Callable[[], datetime] = _utc_now

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	async def create_review_task(
		self,
		owner_id: str,
		archive_name: str,
		due_date: datetime | None = None,
	) -> ScheduleResult:
		"""Insert one review task, due tomorrow unless a date is given."""
		try:
			# naive datetimes are read as local time and stored as an absolute UTC instant
			review_date = (due_date or self.clock() + DEFAULT_REVIEW_DELAY).astimezone(timezone.utc)
			self._logger.info("Creating review task for %s due %s", archive_name, review_date.isoformat())
			task = ReviewTask(
				title=review_title(archive_name),
				description=review_description(archive_name),
				due_date=review_date,
				owner_id=owner_id,
				is_review_task=True,
				archive_name=archive_name,
			)
			record = await self.store.insert(self.table, task.to_record())
		except Exception as exc:  # noqa: BLE001
			self._logger.exception("Review task creation failed for %s: %s", archive_name, exc)
			return ScheduleFailure(error=exc)
		self._logger.info("Review task created: %s", (record or {}).get("id"))
		return ScheduleSuccess(record=record)

	async def update_review_task_status(self, task_id: str, is_completed: bool) -> ScheduleResult:
		"""Set the completion flag of one task; both directions are allowed."""
		try:
			await self.store.update(self.table, {"is_completed": is_completed}, {"id": task_id})
		except Exception as exc:  # noqa: BLE001
			self._logger.exception("Review status update failed for %s: %s", task_id, exc)
			return ScheduleFailure(error=exc)
		self._logger.info("Review task %s marked %s", task_id, "completed" if is_completed else "pending")
		return ScheduleSuccess()
