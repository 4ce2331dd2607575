"""Shared helpers for CLI commands."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from leitner.application.config import AppConfig, resolve_config
from leitner.application.factory import get_card_service
from leitner.domain.models import Card
from leitner.infrastructure.api_client import LeitnerApiClient


def _resolve_with_overrides(**kwargs: Any) -> AppConfig:
    """Build AppConfig from CLI options, dropping the ones left unset."""
    return resolve_config(kwargs)


@asynccontextmanager
async def open_backend(config: AppConfig, remote: bool) -> AsyncIterator[Any]:
    """
    Yield something with the CardService method set.

    Local mode talks to the configured store directly; remote mode goes
    through the HTTP API at `api_base_url`.
    """
    if remote:
        async with LeitnerApiClient(config.api_base_url) as client:
            yield client
    else:
        yield get_card_service(config)


def format_card(card: Card) -> str:
    due = card.next_review.strftime("%Y-%m-%d %H:%M")
    return f"{card.id}  [box {card.box}]  due {due}  ({card.category})  {card.question}"
