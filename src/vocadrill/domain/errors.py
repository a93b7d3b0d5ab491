"""Exceptions raised across the vocadrill layers."""


class VocadrillError(Exception):
    """Base class for vocadrill errors."""


class StorageError(VocadrillError):
    """
    The persistence backend could not be read or written.

    Recoverable: callers may retry or surface the failure to the learner.
    """


class DuplicateItemError(VocadrillError, ValueError):
    """A review item with the same id already exists in the set."""

    def __init__(self, item_id: str):
        super().__init__(f"Review item '{item_id}' already exists")
        self.item_id = item_id
