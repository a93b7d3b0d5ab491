"""
Persisted record shapes for review items and study sessions.

Loading is lenient: a missing or malformed field falls back to its default
so one corrupt record cannot block the rest of the set. Records that cannot
be identified at all (no id, not an object) are rejected by the caller.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vocadrill.domain.constants import (
    DEFAULT_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
)
from vocadrill.domain.review.models import ReviewItem, StudySession

logger = logging.getLogger(__name__)


def _to_number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _to_count(value: Any) -> int:
    return max(0, int(_to_number(value, 0)))


def _to_utc(value: Any) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as UTC. Garbage becomes None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ReviewItemRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    term: str = ""
    definition: str = ""
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    repetitions: int = 0
    lapses: int = 0
    last_reviewed: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("term", "definition", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("ease_factor", mode="before")
    @classmethod
    def coerce_ease(cls, v: Any) -> float:
        return max(MIN_EASE_FACTOR, _to_number(v, DEFAULT_EASE_FACTOR))

    @field_validator("interval_days", mode="before")
    @classmethod
    def coerce_interval(cls, v: Any) -> int:
        return min(MAX_INTERVAL_DAYS, _to_count(v))

    @field_validator("repetitions", "lapses", mode="before")
    @classmethod
    def coerce_counts(cls, v: Any) -> int:
        return _to_count(v)

    @field_validator("last_reviewed", mode="before")
    @classmethod
    def coerce_last_reviewed(cls, v: Any) -> datetime | None:
        return _to_utc(v)

    @classmethod
    def from_domain(cls, item: ReviewItem) -> "ReviewItemRecord":
        return cls(
            id=item.id,
            term=item.term,
            definition=item.definition,
            ease_factor=item.ease_factor,
            interval_days=item.interval_days,
            repetitions=item.repetitions,
            lapses=item.lapses,
            last_reviewed=item.last_reviewed,
        )

    def to_domain(self) -> ReviewItem:
        return ReviewItem(
            id=self.id,
            term=self.term,
            definition=self.definition,
            ease_factor=self.ease_factor,
            interval_days=self.interval_days,
            repetitions=self.repetitions,
            lapses=self.lapses,
            last_reviewed=self.last_reviewed,
        )

    def to_json(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        # Written for external readers only; recomputed from last_reviewed on load.
        next_review = self.to_domain().next_review
        data["next_review"] = next_review.isoformat() if next_review else None
        return data


class StudySessionRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: datetime
    items_studied: int = 0
    correct_answers: int = 0
    average_quality: float = 0.0
    mode: str = "flashcard"

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> datetime | None:
        return _to_utc(v)

    @field_validator("items_studied", "correct_answers", mode="before")
    @classmethod
    def coerce_counts(cls, v: Any) -> int:
        return _to_count(v)

    @field_validator("average_quality", mode="before")
    @classmethod
    def coerce_quality(cls, v: Any) -> float:
        return min(5.0, max(0.0, _to_number(v, 0.0)))

    @field_validator("mode", mode="before")
    @classmethod
    def coerce_mode(cls, v: Any) -> str:
        return "flashcard" if v is None else str(v)

    @classmethod
    def from_domain(cls, session: StudySession) -> "StudySessionRecord":
        return cls(
            date=session.date,
            items_studied=session.items_studied,
            correct_answers=session.correct_answers,
            average_quality=session.average_quality,
            mode=session.mode,
        )

    def to_domain(self) -> StudySession:
        return StudySession(
            date=self.date,
            items_studied=self.items_studied,
            correct_answers=self.correct_answers,
            average_quality=self.average_quality,
            mode=self.mode,
        )


def parse_review_items(raw_records: list[Any]) -> list[ReviewItem]:
    """Repair what can be repaired, skip what cannot, keep the rest."""
    items: list[ReviewItem] = []
    seen: set[str] = set()

    for index, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping review record #{index}: not an object")
            continue
        try:
            item = ReviewItemRecord.model_validate(raw).to_domain()
        except ValueError as e:
            logger.warning(f"Skipping review record #{index}: {e}")
            continue
        if item.id in seen:
            logger.warning(f"Skipping duplicate review record id={item.id}")
            continue
        seen.add(item.id)
        items.append(item)

    return items


def parse_study_sessions(raw_records: list[Any]) -> list[StudySession]:
    sessions: list[StudySession] = []

    for index, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping session record #{index}: not an object")
            continue
        try:
            sessions.append(StudySessionRecord.model_validate(raw).to_domain())
        except ValueError as e:
            logger.warning(f"Skipping session record #{index}: {e}")

    sessions.sort(key=lambda s: s.date)
    return sessions
