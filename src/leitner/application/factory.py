"""
Card Store Factory
Centralizes the logic for selecting the card repository and building services.
"""

import logging

from leitner.application.card_service import CardService
from leitner.application.config import AppConfig
from leitner.application.stats.aggregator import StatsAggregator
from leitner.domain.ports import CardRepository
from leitner.infrastructure.repositories.json_file import JsonFileCardRepository
from leitner.infrastructure.repositories.memory import InMemoryCardRepository

logger = logging.getLogger(__name__)


def get_card_repository(config: AppConfig) -> CardRepository:
    """
    Returns the CardRepository implementation named by `database_uri`.
    """
    if config.database_scheme == "memory":
        logger.info("Card store: in-memory")
        return InMemoryCardRepository()

    path = config.database_path
    logger.info(f"Card store: {path}")
    return JsonFileCardRepository(path)


def get_card_service(config: AppConfig, repo: CardRepository | None = None) -> CardService:
    return CardService(
        repo or get_card_repository(config),
        aggregator=StatsAggregator(config.activity_window_days),
    )
