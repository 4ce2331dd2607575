"""
Ports (interfaces) for card persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Card


class CardRepository(ABC):
    """
    Port for storing and retrieving cards.

    Implementations:
        - InMemoryCardRepository: Process-local dict, used for tests and `memory://`.
        - JsonFileCardRepository: Single JSON document on disk, used for `json://`.

    Adapters return copies; mutating a returned card has no effect until
    it is passed back to `save`.
    """

    @abstractmethod
    async def get(self, card_id: str) -> Card | None:
        """
        Fetch a single card.

        Returns:
            The card, or None if no card has this ID.
        """
        pass

    @abstractmethod
    async def list_for_owner(self, owner: str) -> list[Card]:
        """
        Fetch every card belonging to an owner, in insertion order.
        """
        pass

    @abstractmethod
    async def save(self, card: Card) -> None:
        """
        Insert or replace a card by ID.
        """
        pass

    @abstractmethod
    async def delete(self, card_id: str) -> bool:
        """
        Remove a card.

        Returns:
            True if a card was removed, False if it did not exist.
        """
        pass
