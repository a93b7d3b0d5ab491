"""
In-memory review repository.

Keeps snapshots in process memory. Used for tests, demos and the
`storage_backend = "memory"` setting.
"""

from vocadrill.domain.review.models import ReviewItem, StudySession
from vocadrill.domain.review.ports import ReviewRepository


class InMemoryReviewRepository(ReviewRepository):
    def __init__(
        self,
        items: list[ReviewItem] | None = None,
        sessions: list[StudySession] | None = None,
    ):
        self._items: list[ReviewItem] = list(items or [])
        self._sessions: list[StudySession] = list(sessions or [])

    async def load_review_items(self) -> list[ReviewItem]:
        return list(self._items)

    async def save_review_items(self, items: list[ReviewItem]) -> None:
        self._items = list(items)

    async def get_study_history(self) -> list[StudySession]:
        return sorted(self._sessions, key=lambda s: s.date)

    async def add_study_session(self, session: StudySession) -> None:
        self._sessions.append(session)
