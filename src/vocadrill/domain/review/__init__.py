# Domain Review Package
from .models import (
    Confidence,
    FlashcardRating,
    LearnerLevel,
    MasteryLevel,
    Quality,
    ReviewItem,
    StudySession,
    StudyStatistics,
)
from .ports import ReviewRepository

__all__ = [
    "Confidence",
    "FlashcardRating",
    "LearnerLevel",
    "MasteryLevel",
    "Quality",
    "ReviewItem",
    "StudySession",
    "StudyStatistics",
    "ReviewRepository",
]
