"""Tests for review-task creation and status updates."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from scheduler import ReviewScheduler, ScheduleFailure, ScheduleSuccess, StoreError


@pytest.mark.asyncio
async def test_default_due_date_is_one_day_out(store) -> None:
	"""Without a due date the task is due one day after the call."""
	scheduler = ReviewScheduler(store=store)
	before = datetime.now(timezone.utc)
	result = await scheduler.create_review_task("user-1", "Chapter1")
	after = datetime.now(timezone.utc)

	assert isinstance(result, ScheduleSuccess)
	assert result.success is True
	due = datetime.fromisoformat(store.rows()[0]["due_date"])
	assert before + timedelta(days=1) - timedelta(seconds=5) <= due <= after + timedelta(days=1) + timedelta(seconds=5)


@pytest.mark.asyncio
async def test_created_record_fields(store) -> None:
	"""Scheduler-created rows carry the review tag and archive name."""
	clock = lambda: datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)  # noqa: E731
	scheduler = ReviewScheduler(store=store, clock=clock)
	await scheduler.create_review_task("user-1", "Chapter1")

	row = store.rows()[0]
	assert row["title"] == "Chapter1_Review"
	assert "Chapter1" in row["description"]
	assert row["user_id"] == "user-1"
	assert row["archive_name"] == "Chapter1"
	assert row["is_review_task"] is True
	assert row["is_completed"] is False
	assert datetime.fromisoformat(row["due_date"]) == datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_explicit_past_due_date_is_accepted(store) -> None:
	"""Backfilled reviews with a past due date are stored as given."""
	past = datetime(2020, 1, 1, tzinfo=timezone.utc)
	result = await ReviewScheduler(store=store).create_review_task("user-1", "Old", past)
	assert result.success is True
	assert datetime.fromisoformat(store.rows()[0]["due_date"]) == past


@pytest.mark.asyncio
async def test_identical_calls_create_duplicate_tasks(store) -> None:
	"""Nothing deduplicates repeated enrollments."""
	scheduler = ReviewScheduler(store=store)
	first = await scheduler.create_review_task("user-1", "Chapter1")
	second = await scheduler.create_review_task("user-1", "Chapter1")

	assert first.success and second.success
	assert len(store.rows()) == 2
	assert first.record["id"] != second.record["id"]


@pytest.mark.asyncio
async def test_completion_flag_toggles_both_ways(store) -> None:
	"""pending -> completed -> pending is allowed."""
	scheduler = ReviewScheduler(store=store)
	created = await scheduler.create_review_task("user-1", "Chapter1")
	task_id = created.record["id"]

	assert (await scheduler.update_review_task_status(task_id, True)).success
	assert store.rows()[0]["is_completed"] is True
	assert (await scheduler.update_review_task_status(task_id, False)).success
	assert store.rows()[0]["is_completed"] is False


@pytest.mark.asyncio
async def test_update_of_unknown_id_is_not_checked(store) -> None:
	"""The scheduler issues the update without looking the task up first."""
	result = await ReviewScheduler(store=store).update_review_task_status("missing", True)
	assert result.success is True
	assert store.calls == [("update", "todos")]


@pytest.mark.asyncio
async def test_create_store_failure_is_returned(store, permission_error: StoreError, caplog) -> None:
	"""Store errors come back as data and are logged, not raised."""
	store.fail_with = permission_error
	result = await ReviewScheduler(store=store).create_review_task("user-1", "Chapter1")

	assert isinstance(result, ScheduleFailure)
	assert result.success is False
	assert result.error is permission_error
	assert result.error.code == "PGRST301"
	assert "Review task creation failed" in caplog.text


@pytest.mark.asyncio
async def test_update_store_failure_is_returned(store, permission_error: StoreError) -> None:
	store.fail_with = permission_error
	result = await ReviewScheduler(store=store).update_review_task_status("task-1", True)
	assert isinstance(result, ScheduleFailure)
	assert result.error is permission_error


@pytest.mark.asyncio
async def test_unexpected_exceptions_do_not_escape(store) -> None:
	"""Transport-level surprises are converted like store errors."""
	store.fail_with = ConnectionError("network unreachable")
	result = await ReviewScheduler(store=store).create_review_task("user-1", "Chapter1")
	assert result.success is False
	assert isinstance(result.error, ConnectionError)


@pytest.mark.asyncio
async def test_empty_archive_name_is_a_failure(store) -> None:
	"""Invalid identifiers fail before any insert is attempted."""
	result = await ReviewScheduler(store=store).create_review_task("user-1", "")
	assert result.success is False
	assert store.calls == []


@pytest.mark.asyncio
async def test_custom_table_name(store) -> None:
	await ReviewScheduler(store=store, table="review_tasks").create_review_task("user-1", "Chapter1")
	assert len(store.rows("review_tasks")) == 1


@pytest.mark.asyncio
async def test_naive_due_date_is_stored_as_utc_instant(store) -> None:
	"""A naive due date is taken as local time and written with an offset."""
	naive = datetime(2026, 1, 2, 9, 0)
	result = await ReviewScheduler(store=store).create_review_task("user-1", "Chapter1", naive)

	assert result.success is True
	stored = datetime.fromisoformat(store.rows()[0]["due_date"])
	assert stored.tzinfo is not None
	assert stored.utcoffset() == timedelta(0)
	assert stored == naive.astimezone(timezone.utc)


@pytest.mark.asyncio
async def test_offset_due_date_keeps_its_instant(store) -> None:
	kst = timezone(timedelta(hours=9))
	due = datetime(2026, 1, 2, 9, 0, tzinfo=kst)
	await ReviewScheduler(store=store).create_review_task("user-1", "Chapter1", due)
	assert datetime.fromisoformat(store.rows()[0]["due_date"]) == datetime(2026, 1, 2, 0, 0, tzinfo=timezone.utc)
