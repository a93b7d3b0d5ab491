"""
Quality classification for learner responses.

Maps raw drill input (quiz answers, flashcard buttons) onto the 0-5
quality scale consumed by the scheduler. Pure functions, no I/O.
"""

from vocadrill.domain.constants import MAX_QUALITY, MIN_QUALITY
from vocadrill.domain.review.models import Confidence, FlashcardRating, Quality

# Confidently wrong ranks below a hesitant miss: it points at a wrong mental model.
_QUIZ_QUALITY: dict[tuple[bool, Confidence], Quality] = {
    (True, Confidence.HIGH): Quality.PERFECT,
    (True, Confidence.LOW): Quality.HESITANT,
    (False, Confidence.HIGH): Quality.BLACKOUT,
    (False, Confidence.LOW): Quality.NEAR_MISS,
}


def parse_confidence(value: Confidence | str | None) -> Confidence:
    """Anything other than a recognizable 'high' is treated as low confidence."""
    if isinstance(value, Confidence):
        return value
    if isinstance(value, str) and value.strip().lower() == Confidence.HIGH.value:
        return Confidence.HIGH
    return Confidence.LOW


def response_to_quality(is_correct: bool, confidence: Confidence | str | None) -> Quality:
    """
    Convert a quiz answer plus confidence signal into a quality score.

    Never fails: unrecognized confidence values default to LOW.
    """
    return _QUIZ_QUALITY[(bool(is_correct), parse_confidence(confidence))]


def rating_to_quality(rating: FlashcardRating | str | int) -> Quality:
    """
    Convert a flashcard button (Wrong/Hard/Good/Easy) into a quality score.

    Accepts the enum member, its name (case-insensitive) or its integer value.

    Raises:
        ValueError: If the rating is not one of the four buttons.
    """
    if isinstance(rating, FlashcardRating):
        return Quality(rating.value)
    if isinstance(rating, str):
        name = rating.strip().upper()
        if name in FlashcardRating.__members__:
            return Quality(FlashcardRating[name].value)
        if name.isdigit():
            return rating_to_quality(int(name))
        raise ValueError(f"Unknown flashcard rating: {rating!r}")
    try:
        return Quality(FlashcardRating(rating).value)
    except ValueError:
        raise ValueError(f"Unknown flashcard rating: {rating!r}") from None


def clamp_quality(value: int | float) -> int:
    """Clamp an arbitrary number onto the [0, 5] quality range."""
    return int(min(MAX_QUALITY, max(MIN_QUALITY, value)))
