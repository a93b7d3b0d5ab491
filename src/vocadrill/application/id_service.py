"""Service for generating stable vocadrill IDs for review items."""

from ulid import ULID

ITEM_ID_PREFIX = "vocab_"


def generate_item_id() -> str:
    """Generate a stable, sortable review item ID using ULID."""
    return f"{ITEM_ID_PREFIX}{ULID()}"
