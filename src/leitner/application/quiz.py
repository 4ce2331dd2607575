"""
Quiz generation from mastered cards.

Each question offers the correct answer plus up to three distractors taken
from the other cards in the same quiz. Answers are never invented: with too
few distinct answers a question simply has fewer options.
"""

import random
from collections.abc import Iterable
from typing import TypeVar

from leitner.application.scheduler import clamp_box
from leitner.domain.constants import DEFAULT_QUIZ_SIZE, MAX_BOX, MAX_QUIZ_OPTIONS
from leitner.domain.models import Card, QuizQuestion

T = TypeVar("T")


def shuffle(items: list[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle in place. Every permutation is equally likely."""
    rng = rng or random.Random()
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def is_mastered(card: Card) -> bool:
    return clamp_box(card.box) == MAX_BOX


def sample_mastered(
    cards: Iterable[Card],
    limit: int = DEFAULT_QUIZ_SIZE,
    rng: random.Random | None = None,
) -> list[Card]:
    """
    Random sample, without replacement, of up to `limit` box-5 cards.
    """
    rng = rng or random.Random()
    mastered = [card for card in cards if is_mastered(card)]
    return rng.sample(mastered, min(max(limit, 0), len(mastered)))


def _distractor_pool(selected: list[Card], index: int) -> list[str]:
    correct = selected[index].answer
    pool: list[str] = []
    for other_index, other in enumerate(selected):
        if other_index == index or other.answer == correct or other.answer in pool:
            continue
        pool.append(other.answer)
    return pool


def build_quiz(
    mastered_cards: Iterable[Card],
    size: int = DEFAULT_QUIZ_SIZE,
    rng: random.Random | None = None,
) -> list[QuizQuestion]:
    """
    Build multiple-choice questions from already-mastered cards.

    Args:
        mastered_cards: Candidate cards. Callers pass box-5 cards.
        size: Maximum number of questions.
        rng: Random source; seed one for reproducible quizzes.

    Returns:
        Up to `size` questions, each with 1-4 shuffled options.
    """
    rng = rng or random.Random()
    candidates = list(mastered_cards)
    selected = rng.sample(candidates, min(max(size, 0), len(candidates)))

    questions = []
    for index, card in enumerate(selected):
        pool = _distractor_pool(selected, index)
        distractors = rng.sample(pool, min(MAX_QUIZ_OPTIONS - 1, len(pool)))
        options = shuffle([card.answer, *distractors], rng)
        questions.append(
            QuizQuestion(question=card.question, correct_answer=card.answer, options=options)
        )
    return questions
