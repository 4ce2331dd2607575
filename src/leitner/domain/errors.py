"""Exceptions raised across the Leitner layers."""


class LeitnerError(Exception):
    """Base class for all application errors."""


class CardNotFoundError(LeitnerError):
    """The card does not exist or belongs to another owner."""

    def __init__(self, card_id: str):
        super().__init__(f"Flashcard not found: {card_id}")
        self.card_id = card_id


class InvalidCardError(LeitnerError):
    """Card content failed validation (e.g. empty question)."""


class RepositoryError(LeitnerError):
    """The card store could not be read or written."""


class ApiError(LeitnerError):
    """A remote Leitner server answered with an error status."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
