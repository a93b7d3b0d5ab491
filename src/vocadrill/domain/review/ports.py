"""
Ports (interfaces) for review persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ReviewItem, StudySession


class ReviewRepository(ABC):
    """
    Port for storing review items and the study-session log.

    Implementations:
        - InMemoryReviewRepository: Process-local storage, used by tests and demos.
        - JsonFileReviewRepository: JSON files in the configured data directory.

    Adapters report I/O failures as StorageError. Concurrent writers are
    resolved by the adapter (last writer wins).
    """

    @abstractmethod
    async def load_review_items(self) -> list[ReviewItem]:
        """
        Load the full review item set.

        Returns:
            List of ReviewItem objects. Malformed records are repaired or
            skipped, never fail the whole load.
        """
        pass

    @abstractmethod
    async def save_review_items(self, items: list[ReviewItem]) -> None:
        """
        Replace the stored review item set with the given snapshot.
        """
        pass

    @abstractmethod
    async def get_study_history(self) -> list[StudySession]:
        """
        Fetch the study-session log.

        Returns:
            List of StudySession objects, sorted by date ascending.
        """
        pass

    @abstractmethod
    async def add_study_session(self, session: StudySession) -> None:
        """
        Append a session to the study-session log.
        """
        pass
