"""Leitner-box spaced repetition flashcards."""

from leitner.consts import VERSION

__version__ = VERSION
