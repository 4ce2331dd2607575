# Infrastructure Card Repositories Package
from .json_file import JsonFileCardRepository
from .memory import InMemoryCardRepository

__all__ = ["InMemoryCardRepository", "JsonFileCardRepository"]
