"""SM-2 style spaced-repetition interval computation."""
from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any

from schemas import SrsResult

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3
FIRST_SUCCESS_INTERVAL = 6
REVIEW_HOUR = 9


def _round_half_up(value: float) -> int:
	return math.floor(value + 0.5)


def calculate_srs(
	ease_factor: float,
	interval_days: int,
	quality: int,
	now: datetime | None = None,
) -> SrsResult:
	"""Compute the next ease factor, interval and review date.

	Args:
		ease_factor: Current ease factor (2.5 for new cards).
		interval_days: Current interval in days.
		quality: Recall quality from 0 (blackout) to 5 (perfect).
		now: Reference time; defaults to the local current time.

	Returns:
		SrsResult: New ease factor rounded to two decimals, new interval, and
		the next review at 09:00 local time.
	"""
	new_ease = ease_factor
	if quality < PASSING_QUALITY:
		new_interval = 1
	else:
		miss = 5 - quality
		new_ease = max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))
		if interval_days == 1:
			new_interval = FIRST_SUCCESS_INTERVAL
		else:
			new_interval = _round_half_up(interval_days * new_ease)

	reference = now or datetime.now().astimezone()
	next_date = (reference + timedelta(days=new_interval)).replace(hour=REVIEW_HOUR, minute=0, second=0, microsecond=0)
	return SrsResult(
		ease_factor=_round_half_up(new_ease * 100) / 100,
		interval_days=new_interval,
		next_review_date=next_date,
	)


def confidence_to_quality(confidence: int) -> int:
	"""Clamp a 1-5 self-rated confidence into an SM-2 quality score."""
	return max(1, min(5, int(confidence)))


def update_card_after_review(confidence: int, card: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
	"""Build the field updates for a card after one review session."""
	result = calculate_srs(
		float(card.get("ease_factor", DEFAULT_EASE_FACTOR)),
		int(card.get("interval_days", 1)),
		confidence_to_quality(confidence),
		now=now,
	)
	reference = now or datetime.now().astimezone()
	return {
		"ease_factor": result.ease_factor,
		"interval_days": result.interval_days,
		"next_review_date": result.next_review_date.isoformat(),
		"reviewed_count": int(card.get("reviewed_count", 0)) + 1,
		"updated_at": reference.isoformat(),
	}
