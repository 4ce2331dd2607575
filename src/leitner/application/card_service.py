"""
Card Service: Application layer orchestrator.

Implements every boundary operation (create, list, review, edit, delete,
stats, quiz) by combining the CardRepository with the pure scheduling,
due-selection, statistics and quiz modules.
"""

import asyncio
import logging
import random
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from leitner.domain.constants import DEFAULT_CATEGORY, DEFAULT_QUIZ_SIZE, MIN_BOX
from leitner.domain.errors import CardNotFoundError, InvalidCardError
from leitner.domain.models import Card, QuizQuestion, utc_now
from leitner.domain.ports import CardRepository
from leitner.domain.stats.models import StatsSnapshot

from .due_selector import select_due
from .id_service import generate_card_id
from .quiz import build_quiz, sample_mastered
from .scheduler import apply_outcome
from .stats.aggregator import StatsAggregator

logger = logging.getLogger(__name__)


def _clean(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidCardError(f"{field} must not be empty")
    return cleaned


class CardService:
    """
    Application service for a learner's flashcards.

    Follows Dependency Inversion: depends on the CardRepository abstraction,
    not concrete adapter implementations. Every operation is scoped to an
    owner; cards of other owners behave as if they do not exist.
    """

    def __init__(
        self,
        repo: CardRepository,
        aggregator: StatsAggregator | None = None,
        rng: random.Random | None = None,
    ):
        """
        Args:
            repo: The repository (port) for loading and saving cards.
            aggregator: Optional custom aggregator; uses default window if not provided.
            rng: Random source for mastered sampling and quizzes.
        """
        self._repo = repo
        self._stats = aggregator or StatsAggregator()
        self._rng = rng or random.Random()
        # One writer per card at a time; entries live only while in use
        self._card_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    @asynccontextmanager
    async def _locked(self, card_id: str) -> AsyncIterator[None]:
        lock = self._card_locks.setdefault(card_id, asyncio.Lock())
        self._lock_users[card_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[card_id] -= 1
            if self._lock_users[card_id] <= 0:
                del self._lock_users[card_id]
                del self._card_locks[card_id]

    async def create_card(
        self,
        owner: str,
        question: str,
        answer: str,
        category: str | None = None,
        now: datetime | None = None,
    ) -> Card:
        """
        Create a new card in box 1, due immediately.
        """
        now = now or utc_now()
        card = Card(
            id=generate_card_id(),
            question=_clean(question, "question"),
            answer=_clean(answer, "answer"),
            owner=owner,
            box=MIN_BOX,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            next_review=now,
            created_at=now,
            updated_at=now,
        )
        await self._repo.save(card)
        logger.info(f"Created card {card.id} for {owner}")
        return card

    async def get_card(self, owner: str, card_id: str) -> Card:
        card = await self._repo.get(card_id)
        if card is None or card.owner != owner:
            logger.warning(f"Card {card_id} not found for {owner}")
            raise CardNotFoundError(card_id)
        return card

    async def list_cards(self, owner: str, category: str | None = None) -> list[Card]:
        """All of an owner's cards, newest first, optionally filtered by category."""
        cards = await self._repo.list_for_owner(owner)
        if category:
            cards = [c for c in cards if c.category == category]
        return sorted(cards, key=lambda c: (c.created_at, c.id), reverse=True)

    async def list_due(self, owner: str, as_of: datetime | None = None) -> list[Card]:
        """The owner's review queue, lowest box first."""
        cards = await self._repo.list_for_owner(owner)
        return select_due(cards, as_of)

    async def review_card(
        self,
        owner: str,
        card_id: str,
        is_correct: bool,
        now: datetime | None = None,
    ) -> Card:
        """
        Apply a review outcome and persist the rescheduled card.
        """
        async with self._locked(card_id):
            card = await self.get_card(owner, card_id)
            apply_outcome(card, is_correct, now)
            await self._repo.save(card)

        logger.info(
            f"Reviewed card {card_id} ({'correct' if is_correct else 'incorrect'}), "
            f"now in box {card.box}"
        )
        return card

    async def update_card(
        self,
        owner: str,
        card_id: str,
        question: str | None = None,
        answer: str | None = None,
        category: str | None = None,
        now: datetime | None = None,
    ) -> Card:
        """
        Edit card content. Box and next review are never touched by edits.
        """
        async with self._locked(card_id):
            card = await self.get_card(owner, card_id)
            if question is not None:
                card.question = _clean(question, "question")
            if answer is not None:
                card.answer = _clean(answer, "answer")
            if category is not None:
                card.category = category.strip() or DEFAULT_CATEGORY
            card.updated_at = now or utc_now()
            await self._repo.save(card)

        logger.info(f"Updated card {card_id}")
        return card

    async def delete_card(self, owner: str, card_id: str) -> None:
        async with self._locked(card_id):
            await self.get_card(owner, card_id)
            await self._repo.delete(card_id)
        logger.info(f"Deleted card {card_id}")

    async def get_summary(self, owner: str, as_of: datetime | None = None) -> StatsSnapshot:
        cards = await self._repo.list_for_owner(owner)
        return self._stats.summarize(cards, as_of)

    async def sample_mastered(self, owner: str, limit: int = DEFAULT_QUIZ_SIZE) -> list[Card]:
        """Random selection of the owner's box-5 cards."""
        cards = await self._repo.list_for_owner(owner)
        return sample_mastered(cards, limit, self._rng)

    async def build_quiz(self, owner: str, size: int = DEFAULT_QUIZ_SIZE) -> list[QuizQuestion]:
        mastered = await self.sample_mastered(owner, size)
        return build_quiz(mastered, size, self._rng)
