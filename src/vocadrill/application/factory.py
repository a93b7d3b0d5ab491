"""
Review Repository Factory
Centralizes the logic for selecting the storage adapter.
"""

import logging

from vocadrill.application.config import AppConfig
from vocadrill.domain.review.ports import ReviewRepository
from vocadrill.infrastructure.adapters.storage import (
    InMemoryReviewRepository,
    JsonFileReviewRepository,
)

logger = logging.getLogger(__name__)


def get_review_repository(config: AppConfig) -> ReviewRepository:
    """
    Returns the ReviewRepository implementation selected by config.
    """
    if config.storage_backend == "memory":
        logger.debug("Storage: in-memory")
        return InMemoryReviewRepository()

    logger.debug(f"Storage: JSON files in {config.data_dir}")
    return JsonFileReviewRepository(config.data_dir)
