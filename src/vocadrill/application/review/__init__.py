# Application Review Package
from .due_selector import get_items_due_for_review, is_due, is_overdue, optimal_daily_reviews
from .quality import clamp_quality, parse_confidence, rating_to_quality, response_to_quality
from .scheduler import calculate_next_review, create_review_item, mastery_level

__all__ = [
    "calculate_next_review",
    "clamp_quality",
    "create_review_item",
    "get_items_due_for_review",
    "is_due",
    "is_overdue",
    "mastery_level",
    "optimal_daily_reviews",
    "parse_confidence",
    "rating_to_quality",
    "response_to_quality",
]
