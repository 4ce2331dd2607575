"""
JSON File Card Repository: Infrastructure adapter for a single JSON document.

The whole collection is loaded on first access and rewritten on every
change. Writes go to a temporary file that replaces the original, so a
crash never leaves a half-written store behind.
"""

import asyncio
import json
import logging
import os
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from leitner.domain.constants import DEFAULT_CATEGORY, MIN_BOX
from leitner.domain.errors import RepositoryError
from leitner.domain.models import Card, ensure_utc
from leitner.domain.ports import CardRepository

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def card_to_record(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "question": card.question,
        "answer": card.answer,
        "owner": card.owner,
        "box": card.box,
        "category": card.category,
        "next_review": card.next_review.isoformat(),
        "created_at": card.created_at.isoformat(),
        "updated_at": card.updated_at.isoformat(),
    }


def card_from_record(record: dict[str, Any]) -> Card:
    return Card(
        id=record["id"],
        question=record["question"],
        answer=record["answer"],
        owner=record["owner"],
        box=int(record.get("box", MIN_BOX)),
        category=record.get("category") or DEFAULT_CATEGORY,
        next_review=ensure_utc(datetime.fromisoformat(record["next_review"])),
        created_at=ensure_utc(datetime.fromisoformat(record["created_at"])),
        updated_at=ensure_utc(datetime.fromisoformat(record["updated_at"])),
    )


class JsonFileCardRepository(CardRepository):
    """
    Persists cards to `path` as {"version": 1, "cards": [...]}.

    A missing file is treated as an empty store and created on first save.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._cards: dict[str, Card] | None = None
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, Card]:
        if self._cards is not None:
            return self._cards

        if not self.path.exists():
            logger.debug(f"No card store at {self.path}, starting empty")
            self._cards = {}
            return self._cards

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value is not an object")
            cards = [card_from_record(r) for r in data.get("cards", [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise RepositoryError(f"Could not read card store {self.path}: {e}") from e

        self._cards = {c.id: c for c in cards}
        logger.debug(f"Loaded {len(self._cards)} cards from {self.path}")
        return self._cards

    def _flush(self, cards: dict[str, Card]) -> None:
        """Write `cards` to disk. Callers swap the cache in only after this succeeds."""
        payload = {
            "version": STORE_VERSION,
            "cards": [card_to_record(c) for c in cards.values()],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise RepositoryError(f"Could not write card store {self.path}: {e}") from e

    async def get(self, card_id: str) -> Card | None:
        card = self._load().get(card_id)
        return replace(card) if card else None

    async def list_for_owner(self, owner: str) -> list[Card]:
        return [replace(c) for c in self._load().values() if c.owner == owner]

    async def save(self, card: Card) -> None:
        async with self._lock:
            cards = {**self._load(), card.id: replace(card)}
            self._flush(cards)
            self._cards = cards
        logger.debug(f"Saved card {card.id} to {self.path}")

    async def delete(self, card_id: str) -> bool:
        async with self._lock:
            if card_id not in self._load():
                return False
            cards = {k: v for k, v in self._cards.items() if k != card_id}
            self._flush(cards)
            self._cards = cards
        return True
