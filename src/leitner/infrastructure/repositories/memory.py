"""
In-memory Card Repository.

Keeps cards in a process-local dict. Used for tests and `memory://` stores.
"""

import asyncio
import logging
from dataclasses import replace

from leitner.domain.models import Card
from leitner.domain.ports import CardRepository

logger = logging.getLogger(__name__)


class InMemoryCardRepository(CardRepository):
    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[str, Card] = {c.id: replace(c) for c in cards or []}
        self._lock = asyncio.Lock()

    async def get(self, card_id: str) -> Card | None:
        card = self._cards.get(card_id)
        return replace(card) if card else None

    async def list_for_owner(self, owner: str) -> list[Card]:
        return [replace(c) for c in self._cards.values() if c.owner == owner]

    async def save(self, card: Card) -> None:
        async with self._lock:
            self._cards[card.id] = replace(card)
        logger.debug(f"Saved card {card.id} (box={card.box})")

    async def delete(self, card_id: str) -> bool:
        async with self._lock:
            removed = self._cards.pop(card_id, None)
        return removed is not None
