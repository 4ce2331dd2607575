"""
Leitner review scheduler.

Maps a card's current box and a review outcome to its next box and
next-review timestamp. Pure computation, no I/O.

    correct   -> box + 1 (capped at 5)
    incorrect -> box 1

Box 5 is not terminal: a failed review sends a mastered card back to box 1.
"""

import logging
from datetime import datetime, timedelta

from leitner.domain.constants import BOX_INTERVAL_DAYS, MAX_BOX, MIN_BOX
from leitner.domain.models import Card, ReviewOutcome, utc_now

logger = logging.getLogger(__name__)


def clamp_box(box: int) -> int:
    """Force a (possibly corrupt) box value into [MIN_BOX, MAX_BOX]."""
    return max(MIN_BOX, min(MAX_BOX, box))


def interval_for(box: int) -> timedelta:
    """Review interval for a box: 1, 2, 4, 8 or 16 days."""
    return timedelta(days=BOX_INTERVAL_DAYS[clamp_box(box)])


def next_box(box: int, is_correct: bool) -> int:
    if not is_correct:
        return MIN_BOX
    return min(clamp_box(box) + 1, MAX_BOX)


def apply_outcome(card: Card, is_correct: bool, now: datetime | None = None) -> Card:
    """
    Apply a review result to a card in place.

    Args:
        card: The card that was reviewed.
        is_correct: Whether the learner recalled the answer.
        now: Review time; defaults to the current UTC time.

    Returns:
        The same card, with box, next_review and updated_at refreshed.
    """
    now = now or utc_now()
    previous = card.box

    card.box = next_box(card.box, is_correct)
    card.next_review = now + interval_for(card.box)
    card.updated_at = now

    logger.debug(
        f"Card {card.id}: box {previous} -> {card.box} "
        f"({'correct' if is_correct else 'incorrect'}), next review {card.next_review}"
    )
    return card


def apply_review(card: Card, outcome: ReviewOutcome, now: datetime | None = None) -> Card:
    """Apply a ReviewOutcome addressed to this card."""
    if outcome.card_id != card.id:
        raise ValueError(f"Outcome for {outcome.card_id} applied to card {card.id}")
    return apply_outcome(card, outcome.is_correct, now)
