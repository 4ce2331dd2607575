"""Selects the cards that make up a learner's review queue."""

from collections.abc import Iterable
from datetime import datetime

from leitner.domain.models import Card, ensure_utc, utc_now


def is_due(card: Card, as_of: datetime) -> bool:
    return ensure_utc(card.next_review) <= as_of


def select_due(cards: Iterable[Card], as_of: datetime | None = None) -> list[Card]:
    """
    Return cards whose next review is at or before `as_of`.

    Lower boxes come first so that weak cards are reviewed before strong
    ones. The sort is stable: cards in the same box keep their input order.
    """
    as_of = ensure_utc(as_of) if as_of else utc_now()
    due = [card for card in cards if is_due(card, as_of)]
    return sorted(due, key=lambda card: card.box)
