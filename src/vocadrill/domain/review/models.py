"""
Domain models for the review scheduler.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum, IntEnum

from vocadrill.domain.constants import DEFAULT_EASE_FACTOR


class Confidence(str, Enum):
    """Self-reported confidence attached to a quiz answer."""

    HIGH = "high"
    LOW = "low"


class Quality(IntEnum):
    """
    Normalized recall quality for a single review event.

    Values below DIFFICULT count as a lapse.
    """

    BLACKOUT = 0
    INCORRECT = 1
    NEAR_MISS = 2
    DIFFICULT = 3
    HESITANT = 4
    PERFECT = 5


class FlashcardRating(IntEnum):
    """Labelled flashcard buttons and the quality each one records."""

    WRONG = 0
    HARD = 3
    GOOD = 4
    EASY = 5


class MasteryLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    MASTER = "master"


class LearnerLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class ReviewItem:
    """
    Scheduling state for one learnable term.

    Attributes:
        id: Stable identifier, unique across the item set.
        term: Display string for the prompt side.
        definition: Display string for the answer side.
        ease_factor: Interval growth multiplier, never below 1.3.
        interval_days: Days until the next scheduled review.
        repetitions: Consecutive successful reviews since the last lapse.
        lapses: Number of reviews recorded with quality < 3.
        last_reviewed: UTC timestamp of the last review, None if never reviewed.
    """

    id: str
    term: str
    definition: str
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    repetitions: int = 0
    lapses: int = 0
    last_reviewed: datetime | None = None

    @property
    def is_new(self) -> bool:
        return self.last_reviewed is None

    @property
    def next_review(self) -> datetime | None:
        """
        When the item is next due.

        Derived from last_reviewed + interval_days. None means the item
        has never been reviewed and is due now.
        """
        if self.last_reviewed is None:
            return None
        try:
            return self.last_reviewed + timedelta(days=self.interval_days)
        except OverflowError:
            return datetime.max.replace(tzinfo=self.last_reviewed.tzinfo)


@dataclass(frozen=True)
class StudySession:
    """
    A study session log entry, written by the session layer.

    Attributes:
        date: When the session took place (UTC).
        items_studied: Number of answers given.
        correct_answers: Number of answers with quality >= 3.
        average_quality: Mean quality over the session's answers.
        mode: Drill type (flashcard, quiz, ...). Opaque to the scheduler.
    """

    date: datetime
    items_studied: int
    correct_answers: int
    average_quality: float
    mode: str = "flashcard"


@dataclass
class StudyStatistics:
    """
    Dashboard metrics recomputed on demand from items and the session log.
    """

    total_reviews: int = 0
    correct_reviews: int = 0
    average_quality: float = 0.0
    study_streak: int = 0
    mastered_items: int = 0
    items_to_review: int = 0
    estimated_time: int = 0  # seconds

    total_items: int = 0
    overdue_items: int = 0
    learning_items: int = 0
    average_ease_factor: float = 0.0
    average_interval: float = 0.0
    success_rate: float = 0.0
    longest_streak: int = 0
