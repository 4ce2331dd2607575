from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from leitner.application.config import AppConfig
from leitner.consts import VERSION
from leitner.server import create_app

ALICE = {"X-User-Id": "alice"}


@pytest.fixture
def client():
    app = create_app(AppConfig(database_uri="memory://", cors_origins=["*"]))
    return TestClient(app)


def _create(client, question="Q", answer="A", headers=ALICE, **extra):
    response = client.post(
        "/api/flashcards", json={"question": question, "answer": answer, **extra}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_create_card_shape(client):
    data = _create(client, question=" What? ", answer=" That ", category="Words")

    assert data["box"] == 1
    assert data["question"] == "What?"
    assert data["category"] == "Words"
    assert data["user"] == "alice"
    assert set(data) == {
        "id", "question", "answer", "box", "nextReview",
        "category", "user", "createdAt", "updatedAt",
    }
    next_review = datetime.fromisoformat(data["nextReview"])
    assert abs(next_review - datetime.now(timezone.utc)) < timedelta(minutes=1)


def test_create_card_rejects_blank_text(client):
    response = client.post("/api/flashcards", json={"question": "", "answer": "A"}, headers=ALICE)
    assert response.status_code == 400
    assert "question" in response.json()["detail"]

    response = client.post(
        "/api/flashcards", json={"question": "Q", "answer": "   "}, headers=ALICE
    )
    assert response.status_code == 400


def test_create_card_missing_field_is_unprocessable(client):
    response = client.post("/api/flashcards", json={"question": "Q"}, headers=ALICE)
    assert response.status_code == 422


def test_update_rejects_blank_text(client):
    card = _create(client)
    response = client.put(f"/api/flashcards/{card['id']}", json={"question": " "}, headers=ALICE)
    assert response.status_code == 400

    stored = client.get(f"/api/flashcards/{card['id']}", headers=ALICE).json()
    assert stored["question"] == card["question"]


def test_update_cannot_change_owner(client):
    card = _create(client)

    response = client.put(
        f"/api/flashcards/{card['id']}",
        json={"answer": "B", "user": "bob", "owner": "bob"},
        headers=ALICE,
    )

    assert response.status_code == 200
    assert response.json()["user"] == "alice"
    assert client.get(f"/api/flashcards/{card['id']}", headers=ALICE).json()["user"] == "alice"
    response = client.get(f"/api/flashcards/{card['id']}", headers={"X-User-Id": "bob"})
    assert response.status_code == 404


def test_default_owner_without_header(client):
    data = _create(client, headers={})
    assert data["user"] == "default"


def test_review_flow(client):
    card = _create(client)

    response = client.patch(
        f"/api/flashcards/{card['id']}/review", json={"isCorrect": True}, headers=ALICE
    )
    assert response.status_code == 200
    data = response.json()
    assert data["box"] == 2
    delta = datetime.fromisoformat(data["nextReview"]) - datetime.fromisoformat(data["updatedAt"])
    assert delta == timedelta(days=2)

    response = client.patch(
        f"/api/flashcards/{card['id']}/review", json={"isCorrect": False}, headers=ALICE
    )
    assert response.json()["box"] == 1


@pytest.mark.parametrize("bad", ["true", 1, None, "yes"])
def test_review_rejects_non_boolean(client, bad):
    card = _create(client)
    response = client.patch(
        f"/api/flashcards/{card['id']}/review", json={"isCorrect": bad}, headers=ALICE
    )
    assert response.status_code == 422


def test_review_missing_card(client):
    response = client.patch("/api/flashcards/nope/review", json={"isCorrect": True}, headers=ALICE)
    assert response.status_code == 404
    assert response.json()["detail"] == "Flashcard not found"


def test_other_owner_cannot_see_card(client):
    card = _create(client)
    response = client.get(f"/api/flashcards/{card['id']}", headers={"X-User-Id": "bob"})
    assert response.status_code == 404


def test_due_list_sorted_by_box(client):
    first = _create(client, question="first")
    second = _create(client, question="second")
    # A correct review moves `first` two days out
    client.patch(f"/api/flashcards/{first['id']}/review", json={"isCorrect": True}, headers=ALICE)

    due = client.get("/api/flashcards/due", headers=ALICE).json()

    assert [c["id"] for c in due] == [second["id"]]


def test_update_and_delete(client):
    card = _create(client)

    response = client.put(
        f"/api/flashcards/{card['id']}", json={"answer": "B"}, headers=ALICE
    )
    assert response.status_code == 200
    assert response.json()["answer"] == "B"
    assert response.json()["box"] == card["box"]
    assert response.json()["nextReview"] == card["nextReview"]

    response = client.delete(f"/api/flashcards/{card['id']}", headers=ALICE)
    assert response.status_code == 200
    assert response.json() == {"message": "Flashcard deleted successfully"}

    assert client.delete(f"/api/flashcards/{card['id']}", headers=ALICE).status_code == 404


def test_list_cards_filters_category(client):
    _create(client, category="Maths")
    _create(client, category="History")

    cards = client.get("/api/flashcards", params={"category": "Maths"}, headers=ALICE).json()
    assert [c["category"] for c in cards] == ["Maths"]


def test_stats_summary_empty(client):
    response = client.get("/api/flashcards/stats/summary", headers=ALICE)

    assert response.status_code == 200
    assert response.json() == {
        "totalCards": 0,
        "dueToday": 0,
        "reviewedToday": 0,
        "todayProgress": 100,
        "currentStreak": 0,
        "activityData": {},
        "boxStats": [{"box": b, "count": 0} for b in range(1, 6)],
    }


def test_stats_summary_after_activity(client):
    card = _create(client)
    _create(client)
    client.patch(f"/api/flashcards/{card['id']}/review", json={"isCorrect": True}, headers=ALICE)

    data = client.get("/api/flashcards/stats/summary", headers=ALICE).json()

    assert data["totalCards"] == 2
    assert data["dueToday"] == 1
    assert data["reviewedToday"] == 2
    assert data["todayProgress"] == 100
    assert data["currentStreak"] == 1
    assert [b["count"] for b in data["boxStats"]] == [1, 1, 0, 0, 0]
    assert sum(data["activityData"].values()) == 2


def test_stats_summary_failure(client):
    with patch(
        "leitner.application.card_service.CardService.get_summary",
        new_callable=AsyncMock,
        side_effect=Exception("Boom"),
    ):
        response = client.get("/api/flashcards/stats/summary", headers=ALICE)
    assert response.status_code == 500
    assert "Boom" in response.json()["detail"]


def _master(client, card_id):
    for _ in range(4):
        client.patch(f"/api/flashcards/{card_id}/review", json={"isCorrect": True}, headers=ALICE)


def test_mastered_and_quiz(client):
    mastered = [_create(client, answer=f"A{i}") for i in range(3)]
    _create(client, answer="learning")
    for card in mastered:
        _master(client, card["id"])

    sample = client.get("/api/flashcards/mastered", params={"limit": 2}, headers=ALICE).json()
    assert len(sample) == 2
    assert all(c["box"] == 5 for c in sample)

    quiz = client.get("/api/flashcards/quiz", headers=ALICE).json()
    assert len(quiz) == 3
    for q in quiz:
        assert q["correctAnswer"] in q["options"]
        assert len(q["options"]) == 3
        assert "learning" not in q["options"]


def test_mastered_limit_must_be_positive(client):
    response = client.get("/api/flashcards/mastered", params={"limit": 0}, headers=ALICE)
    assert response.status_code == 422


def test_cors_headers(client):
    response = client.options(
        "/api/flashcards",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers
