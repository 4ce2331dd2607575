from datetime import datetime, timezone

import pytest

from leitner.application.card_service import CardService
from leitner.domain.models import Card
from leitner.infrastructure.repositories.memory import InMemoryCardRepository

FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """A fixed, timezone-aware 'current time' at noon UTC."""
    return FIXED_NOW


@pytest.fixture
def make_card(now):
    """Factory for cards with sensible defaults; override any field."""
    counter = {"n": 0}

    def _make(**overrides) -> Card:
        counter["n"] += 1
        fields = {
            "id": f"card-{counter['n']}",
            "question": f"Question {counter['n']}?",
            "answer": f"Answer {counter['n']}",
            "owner": "alice",
            "box": 1,
            "next_review": now,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Card(**fields)

    return _make


@pytest.fixture
def repo():
    return InMemoryCardRepository()


@pytest.fixture
def service(repo):
    return CardService(repo)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir and clears LEITNER_* env."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    for key in [
        "LEITNER_API_BASE_URL",
        "LEITNER_DATABASE_URI",
        "LEITNER_CORS_ORIGINS",
        "LEITNER_DEFAULT_OWNER",
        "LEITNER_QUIZ_SIZE",
    ]:
        monkeypatch.delenv(key, raising=False)
    return home
