from datetime import datetime, timedelta, timezone

import pytest

from vocadrill.application.config import AppConfig
from vocadrill.application.review_service import ReviewService
from vocadrill.domain.review.models import ReviewItem
from vocadrill.infrastructure.adapters.storage import InMemoryReviewRepository

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item():
    """Factory for review items; reviewed_days_ago=None gives a never-reviewed item."""

    def _make(
        item_id: str = "w1",
        *,
        ease_factor: float = 2.5,
        interval_days: int = 0,
        repetitions: int = 0,
        lapses: int = 0,
        reviewed_days_ago: float | None = None,
    ) -> ReviewItem:
        last_reviewed = None
        if reviewed_days_ago is not None:
            last_reviewed = NOW - timedelta(days=reviewed_days_ago)
        return ReviewItem(
            id=item_id,
            term=f"term-{item_id}",
            definition=f"definition-{item_id}",
            ease_factor=ease_factor,
            interval_days=interval_days,
            repetitions=repetitions,
            lapses=lapses,
            last_reviewed=last_reviewed,
        )

    return _make


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Config that ignores the developer's own config files and env."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in (
        "VOCADRILL_DATA_DIR",
        "VOCADRILL_STORAGE_BACKEND",
        "VOCADRILL_SESSION_LIMIT",
        "VOCADRILL_VERBOSE",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("vocadrill.application.config.CONFIG_FILES", [])
    return AppConfig(data_dir=tmp_path / "data", storage_backend="memory")


@pytest.fixture
def memory_repo():
    return InMemoryReviewRepository()


@pytest.fixture
def service(memory_repo, isolated_config):
    return ReviewService(memory_repo, isolated_config)
