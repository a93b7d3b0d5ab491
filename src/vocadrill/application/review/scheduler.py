"""
SM-2 review scheduling.

This is a pure computation module with no I/O. Every function returns a new
ReviewItem and leaves its input untouched.
"""

import math
from dataclasses import replace
from datetime import datetime, timezone

from vocadrill.domain.constants import (
    DEFAULT_EASE_FACTOR,
    EASE_FACTOR_PRECISION,
    FIRST_INTERVAL_DAYS,
    LAPSE_INTERVAL_DAYS,
    MASTERY_LEVEL_THRESHOLDS,
    MAX_INTERVAL_DAYS,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)
from vocadrill.domain.review.models import MasteryLevel, ReviewItem

from .quality import clamp_quality


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves up (Python's round() is banker's)."""
    # 15 * 2.3 is 34.49999999999999 in binary floating point
    return int(math.floor(round(value, 9) + 0.5))


def create_review_item(item_id: str, term: str, definition: str) -> ReviewItem:
    """
    Create the initial scheduling state for a newly learned term.

    The item has never been reviewed, so it is due immediately. Callers own
    duplicate prevention: creating a second item for the same id without
    discarding the first yields duplicate entries.
    """
    return ReviewItem(
        id=item_id,
        term=term,
        definition=definition,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval_days=0,
        repetitions=0,
        lapses=0,
        last_reviewed=None,
    )


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Apply the SM-2 ease factor delta for a review of the given quality.

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.
    Quality 5 adds 0.1, quality 4 leaves EF unchanged, quality 0 subtracts 0.8.
    """
    q = clamp_quality(quality)
    miss = MAX_QUALITY - q
    updated = round(ease_factor + (0.1 - miss * (0.08 + miss * 0.02)), EASE_FACTOR_PRECISION)
    return max(MIN_EASE_FACTOR, updated)


def next_interval(repetitions: int, interval_days: int, ease_factor: float, quality: int) -> int:
    """
    Days until the next review after answering with the given quality.

    Args:
        repetitions: Successful streak *before* this review.
        interval_days: Current interval.
        ease_factor: Ease factor to grow the interval by (already updated).
        quality: Clamped quality of this review.
    """
    if quality < PASSING_QUALITY:
        return LAPSE_INTERVAL_DAYS
    if repetitions == 0:
        return FIRST_INTERVAL_DAYS
    if repetitions == 1:
        return SECOND_INTERVAL_DAYS
    return min(MAX_INTERVAL_DAYS, max(1, round_half_up(interval_days * ease_factor)))


def calculate_next_review(
    item: ReviewItem,
    quality: int,
    now: datetime | None = None,
) -> ReviewItem:
    """
    Compute the scheduling state after one review.

    Out-of-range quality is clamped to [0, 5] so the function is total.
    A lapse (quality < 3) resets repetitions, sets a 1-day interval and
    counts the lapse. A success grows the interval 1 -> 6 -> interval * EF,
    capped at MAX_INTERVAL_DAYS.

    Args:
        item: Current state; not modified.
        quality: Recall quality 0-5.
        now: Review time. Defaults to the current UTC time.

    Returns:
        New ReviewItem with last_reviewed = now, so next_review = now + interval.
    """
    q = clamp_quality(quality)
    reviewed_at = now or utcnow()
    ease_factor = update_ease_factor(item.ease_factor, q)
    interval = next_interval(item.repetitions, item.interval_days, ease_factor, q)

    if q < PASSING_QUALITY:
        repetitions = 0
        lapses = item.lapses + 1
    else:
        repetitions = item.repetitions + 1
        lapses = item.lapses

    return replace(
        item,
        ease_factor=ease_factor,
        interval_days=interval,
        repetitions=repetitions,
        lapses=lapses,
        last_reviewed=reviewed_at,
    )


def mastery_level(item: ReviewItem | None) -> MasteryLevel:
    """Coarse progress label from the current success streak."""
    if item is None:
        return MasteryLevel.BEGINNER
    if item.repetitions >= MASTERY_LEVEL_THRESHOLDS["master"]:
        return MasteryLevel.MASTER
    if item.repetitions >= MASTERY_LEVEL_THRESHOLDS["advanced"]:
        return MasteryLevel.ADVANCED
    if item.repetitions >= MASTERY_LEVEL_THRESHOLDS["intermediate"]:
        return MasteryLevel.INTERMEDIATE
    return MasteryLevel.BEGINNER
