"""
Review Service: application layer orchestrator.

Coordinates the persistence port with the pure scheduling, due-selection
and statistics functions. This is the collaborator that owns the item set:
it prevents duplicate ids and reports unknown ids instead of inventing items.
"""

import logging
from datetime import datetime, timezone

from vocadrill.application.config import AppConfig
from vocadrill.application.id_service import generate_item_id
from vocadrill.application.review.due_selector import (
    get_items_due_for_review,
    optimal_daily_reviews,
)
from vocadrill.application.review.quality import (
    clamp_quality,
    rating_to_quality,
    response_to_quality,
)
from vocadrill.application.review.scheduler import (
    calculate_next_review,
    create_review_item,
    utcnow,
)
from vocadrill.application.stats.statistics_calculator import StatisticsCalculator
from vocadrill.domain.constants import MAX_QUALITY
from vocadrill.domain.errors import DuplicateItemError
from vocadrill.domain.review.models import (
    Confidence,
    FlashcardRating,
    LearnerLevel,
    ReviewItem,
    StudySession,
    StudyStatistics,
)
from vocadrill.domain.review.ports import ReviewRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for managing review items and study sessions.

    Follows Dependency Inversion: depends on the ReviewRepository abstraction,
    not concrete adapter implementations. Storage failures propagate as
    StorageError; nothing is retried here.
    """

    def __init__(
        self,
        repository: ReviewRepository,
        config: AppConfig | None = None,
        calculator: StatisticsCalculator | None = None,
    ):
        """
        Args:
            repository: The repository (port) for items and sessions.
            config: Resolved settings; defaults are used if not provided.
            calculator: Optional custom calculator; built from config if not provided.
        """
        self._repo = repository
        self._config = config or AppConfig()
        self._calc = calculator or StatisticsCalculator(
            seconds_per_item=self._config.seconds_per_item,
            mastery_threshold=self._config.mastery_ease_threshold,
            mastery_repetitions=self._config.mastery_repetitions,
        )

    async def list_items(self) -> list[ReviewItem]:
        return await self._repo.load_review_items()

    async def get_item(self, item_id: str) -> ReviewItem | None:
        items = await self._repo.load_review_items()
        return next((item for item in items if item.id == item_id), None)

    async def add_term(
        self,
        term: str,
        definition: str,
        item_id: str | None = None,
    ) -> ReviewItem:
        """
        Add a new term to the vocabulary set.

        Raises:
            DuplicateItemError: If an item with this id already exists.
        """
        items = await self._repo.load_review_items()
        new_id = item_id or generate_item_id()

        if any(item.id == new_id for item in items):
            raise DuplicateItemError(new_id)

        item = create_review_item(new_id, term.strip(), definition.strip())
        items.append(item)
        await self._repo.save_review_items(items)
        logger.info(f"Added review item {new_id} ({item.term!r})")
        return item

    async def remove_term(self, item_id: str) -> bool:
        """Delete an item. Returns False if the id is unknown."""
        items = await self._repo.load_review_items()
        remaining = [item for item in items if item.id != item_id]

        if len(remaining) == len(items):
            logger.warning(f"Cannot remove unknown review item {item_id}")
            return False

        await self._repo.save_review_items(remaining)
        logger.info(f"Removed review item {item_id}")
        return True

    async def record_review(
        self,
        item_id: str,
        quality: int,
        now: datetime | None = None,
    ) -> ReviewItem | None:
        """
        Schedule an item after an answer of the given quality.

        Returns:
            The updated item, or None if no item has this id.
        """
        items = await self._repo.load_review_items()

        for index, item in enumerate(items):
            if item.id == item_id:
                updated = calculate_next_review(item, quality, now)
                items[index] = updated
                await self._repo.save_review_items(items)
                logger.debug(
                    f"Reviewed {item_id}: q={clamp_quality(quality)} "
                    f"interval={updated.interval_days}d ef={updated.ease_factor}"
                )
                return updated

        logger.warning(f"Review for unknown item {item_id} ignored")
        return None

    async def record_flashcard(
        self,
        item_id: str,
        rating: FlashcardRating | str | int,
        now: datetime | None = None,
    ) -> ReviewItem | None:
        return await self.record_review(item_id, rating_to_quality(rating), now)

    async def record_quiz_answer(
        self,
        item_id: str,
        is_correct: bool,
        confidence: Confidence | str | None,
        now: datetime | None = None,
    ) -> ReviewItem | None:
        return await self.record_review(item_id, response_to_quality(is_correct, confidence), now)

    async def get_due_items(
        self,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[ReviewItem]:
        """Due items, most urgent first, capped at the configured session size by default."""
        items = await self._repo.load_review_items()
        cap = self._config.session_limit if limit is None else limit
        return get_items_due_for_review(items, cap, now)

    async def log_session(
        self,
        items_studied: int,
        correct_answers: int,
        average_quality: float,
        mode: str = "flashcard",
        date: datetime | None = None,
    ) -> StudySession:
        if date is not None and date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        session = StudySession(
            date=date or utcnow(),
            items_studied=max(0, items_studied),
            correct_answers=max(0, min(correct_answers, items_studied)),
            average_quality=min(float(MAX_QUALITY), max(0.0, average_quality)),
            mode=mode,
        )
        await self._repo.add_study_session(session)
        logger.info(
            f"Logged {mode} session: {session.correct_answers}/{session.items_studied} correct"
        )
        return session

    async def get_study_history(self) -> list[StudySession]:
        return await self._repo.get_study_history()

    async def get_statistics(self, now: datetime | None = None) -> StudyStatistics:
        items = await self._repo.load_review_items()
        sessions = await self._repo.get_study_history()
        return self._calc.calculate(items, sessions, now)

    async def get_daily_target(
        self,
        learner_level: LearnerLevel | str | None = None,
        now: datetime | None = None,
    ) -> int:
        items = await self._repo.load_review_items()
        return optimal_daily_reviews(items, learner_level or self._config.learner_level, now)
