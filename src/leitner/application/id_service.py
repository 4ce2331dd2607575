"""Service for generating stable card IDs."""

from ulid import ULID


def generate_card_id() -> str:
    """Generate a card ID using ULID. IDs sort by creation time."""
    return str(ULID())
