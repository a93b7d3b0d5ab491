"""
Due selection for study sessions.

Builds the ordered list of items a learner should review next:
1. Filter to items whose next review has passed (never-reviewed items always qualify)
2. Put never-reviewed items first, keeping their input order
3. Order the rest by next review ascending (most overdue first)
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from vocadrill.domain.constants import DAILY_REVIEW_BASE, OVERDUE_GRACE_DAYS
from vocadrill.domain.review.models import LearnerLevel, ReviewItem

from .scheduler import round_half_up, utcnow


def is_due(item: ReviewItem, now: datetime | None = None) -> bool:
    next_review = item.next_review
    if next_review is None:
        return True
    return next_review <= (now or utcnow())


def is_overdue(item: ReviewItem, now: datetime | None = None) -> bool:
    """True when the item has been due for more than the grace period."""
    next_review = item.next_review
    if next_review is None:
        return False
    return next_review < (now or utcnow()) - timedelta(days=OVERDUE_GRACE_DAYS)


def get_items_due_for_review(
    items: Iterable[ReviewItem],
    limit: int | None,
    now: datetime | None = None,
) -> list[ReviewItem]:
    """
    Return the items due for review, most urgent first.

    Args:
        items: Full item set; not modified.
        limit: Maximum number of items to return. None means no cap;
            zero or a negative number yields an empty list.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        Never-reviewed items first, then reviewed items by ascending
        next_review. Empty list when nothing is due.
    """
    if limit is not None and limit <= 0:
        return []

    reference = now or utcnow()
    fresh: list[ReviewItem] = []
    scheduled: list[ReviewItem] = []

    for item in items:
        if item.is_new:
            fresh.append(item)
        elif is_due(item, reference):
            scheduled.append(item)

    # sort() is stable, so equal timestamps keep input order
    scheduled.sort(key=lambda i: i.next_review)
    ordered = fresh + scheduled

    if limit is None:
        return ordered
    return ordered[:limit]


def optimal_daily_reviews(
    items: Iterable[ReviewItem],
    learner_level: LearnerLevel | str = LearnerLevel.INTERMEDIATE,
    now: datetime | None = None,
) -> int:
    """
    Suggest how many reviews to do today given the current backlog.

    A large backlog raises the target by up to 30% over the level's base;
    a small one still asks for at least 70% of the base.
    """
    level = LearnerLevel(learner_level)
    base = DAILY_REVIEW_BASE[level.value]
    due_count = len(get_items_due_for_review(items, None, now))

    if due_count > base * 1.5:
        target = min(base * 1.3, due_count)
    elif due_count < base * 0.5:
        target = max(base * 0.7, due_count)
    else:
        target = min(base, due_count)

    return round_half_up(target)
