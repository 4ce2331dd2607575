"""
Domain models for Leitner flashcards.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .constants import DEFAULT_CATEGORY, MIN_BOX


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Card:
    """
    A question/answer flashcard scheduled by Leitner box.

    Attributes:
        id: Stable card ID (ULID string).
        question: Prompt shown to the learner.
        answer: Expected answer.
        owner: Opaque reference to the owning user. Never changes.
        box: Leitner box, 1 (new / forgotten) to 5 (mastered).
        next_review: When the card becomes due again.
        category: Free-form grouping label.
        created_at: Creation timestamp.
        updated_at: Last review or edit. Drives streak and activity stats.
    """

    id: str
    question: str
    answer: str
    owner: str
    next_review: datetime
    created_at: datetime
    updated_at: datetime
    box: int = MIN_BOX
    category: str = DEFAULT_CATEGORY


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of a single review. Applied to a card immediately and discarded."""

    card_id: str
    is_correct: bool


@dataclass
class QuizQuestion:
    """A multiple-choice question built from a mastered card."""

    question: str
    correct_answer: str
    options: list[str] = field(default_factory=list)
