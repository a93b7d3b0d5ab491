"""
Statistics calculator for study dashboards.

This is a pure computation module with no I/O. Historical review counts
come from the study-session log, which also covers reviews of items that
were later deleted; item state supplies the due/mastery snapshot.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from vocadrill.application.review.due_selector import get_items_due_for_review, is_overdue
from vocadrill.application.review.scheduler import utcnow
from vocadrill.domain.constants import (
    MASTERY_EASE_THRESHOLD,
    MASTERY_MIN_REPETITIONS,
    SECONDS_PER_ITEM,
)
from vocadrill.domain.review.models import ReviewItem, StudySession, StudyStatistics


class StatisticsCalculator:
    """
    Computes StudyStatistics from a review item set and the session log.

    Stateless and side-effect free.
    """

    def __init__(
        self,
        seconds_per_item: int = SECONDS_PER_ITEM,
        mastery_threshold: float = MASTERY_EASE_THRESHOLD,
        mastery_repetitions: int = MASTERY_MIN_REPETITIONS,
    ):
        self.seconds_per_item = seconds_per_item
        self.mastery_threshold = mastery_threshold
        self.mastery_repetitions = mastery_repetitions

    def calculate(
        self,
        items: Iterable[ReviewItem],
        sessions: Iterable[StudySession] = (),
        now: datetime | None = None,
    ) -> StudyStatistics:
        """
        Aggregate dashboard metrics. Empty inputs give all-zero statistics.
        """
        reference = now or utcnow()
        items = list(items)
        sessions = list(sessions)

        items_to_review = len(get_items_due_for_review(items, None, reference))
        mastered = sum(1 for item in items if self.is_mastered(item))
        total_reviews = sum(s.items_studied for s in sessions)
        correct_reviews = sum(s.correct_answers for s in sessions)
        session_days = {s.date.astimezone(timezone.utc).date() for s in sessions}

        return StudyStatistics(
            total_reviews=total_reviews,
            correct_reviews=correct_reviews,
            average_quality=self._compute_average_quality(sessions),
            study_streak=self._compute_current_streak(
                session_days, reference.astimezone(timezone.utc).date()
            ),
            mastered_items=mastered,
            items_to_review=items_to_review,
            estimated_time=items_to_review * self.seconds_per_item,
            total_items=len(items),
            overdue_items=sum(1 for item in items if is_overdue(item, reference)),
            learning_items=len(items) - mastered,
            average_ease_factor=self._mean([item.ease_factor for item in items]),
            average_interval=self._mean([item.interval_days for item in items]),
            success_rate=correct_reviews / total_reviews if total_reviews else 0.0,
            longest_streak=self._compute_longest_streak(session_days),
        )

    def is_mastered(self, item: ReviewItem) -> bool:
        """Enough consecutive successes and an ease factor grown past the threshold."""
        return (
            item.repetitions >= self.mastery_repetitions
            and item.ease_factor > self.mastery_threshold
        )

    def _compute_average_quality(self, sessions: list[StudySession]) -> float:
        """
        Mean quality across sessions, weighted by the answers in each.

        Falls back to a plain mean when no session recorded any answers.
        """
        if not sessions:
            return 0.0

        weight = sum(s.items_studied for s in sessions)
        if weight == 0:
            return self._mean([s.average_quality for s in sessions])

        return sum(s.average_quality * s.items_studied for s in sessions) / weight

    def _compute_current_streak(self, session_days: set[date], today: date) -> int:
        """
        Consecutive days with at least one session, counting back from today.

        A day without sessions (including today) ends the streak.
        """
        streak = 0
        day = today
        while day in session_days:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def _compute_longest_streak(self, session_days: set[date]) -> int:
        longest = 0
        current = 0
        previous: date | None = None

        for day in sorted(session_days):
            if previous is not None and day - previous == timedelta(days=1):
                current += 1
            else:
                current = 1
            longest = max(longest, current)
            previous = day

        return longest

    @staticmethod
    def _mean(values: list[float]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)


def calculate_statistics(
    items: Iterable[ReviewItem],
    sessions: Iterable[StudySession] = (),
    now: datetime | None = None,
    seconds_per_item: int = SECONDS_PER_ITEM,
    mastery_threshold: float = MASTERY_EASE_THRESHOLD,
    mastery_repetitions: int = MASTERY_MIN_REPETITIONS,
) -> StudyStatistics:
    """Functional entry point over StatisticsCalculator."""
    calculator = StatisticsCalculator(
        seconds_per_item=seconds_per_item,
        mastery_threshold=mastery_threshold,
        mastery_repetitions=mastery_repetitions,
    )
    return calculator.calculate(items, sessions, now)
