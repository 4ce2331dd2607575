"""
HTTP client for a running Leitner server.

Mirrors the CardService method signatures so callers (the CLI) can work
against either a local store or a remote server.
"""

import logging
from datetime import datetime
from typing import Any

import httpx

from leitner.domain.constants import DEFAULT_QUIZ_SIZE, OWNER_HEADER, REQUEST_TIMEOUT
from leitner.domain.errors import ApiError, CardNotFoundError
from leitner.domain.models import Card, QuizQuestion, ensure_utc
from leitner.domain.stats.models import BoxCount, StatsSnapshot


def _parse_time(value: str) -> datetime:
    return ensure_utc(datetime.fromisoformat(value))


def card_from_payload(data: dict[str, Any]) -> Card:
    return Card(
        id=data["id"],
        question=data["question"],
        answer=data["answer"],
        owner=data["user"],
        box=data["box"],
        category=data["category"],
        next_review=_parse_time(data["nextReview"]),
        created_at=_parse_time(data["createdAt"]),
        updated_at=_parse_time(data["updatedAt"]),
    )


def snapshot_from_payload(data: dict[str, Any]) -> StatsSnapshot:
    return StatsSnapshot(
        total_cards=data["totalCards"],
        due_today=data["dueToday"],
        reviewed_today=data["reviewedToday"],
        today_progress=data["todayProgress"],
        current_streak=data["currentStreak"],
        box_stats=tuple(BoxCount(box=b["box"], count=b["count"]) for b in data["boxStats"]),
        activity_by_date=dict(data.get("activityData", {})),
    )


class LeitnerApiClient:
    """Async client for the /api/flashcards endpoints."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:5000/api",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=REQUEST_TIMEOUT,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "LeitnerApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        owner: str,
        card_id: str | None = None,
        **kwargs,
    ) -> Any:
        headers = {OWNER_HEADER: owner}
        try:
            resp = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            self.logger.error(f"Leitner API call failed: {method} {path}: {e}")
            raise

        if resp.status_code == 404 and card_id is not None:
            raise CardNotFoundError(card_id)
        if resp.is_error:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            self.logger.error(f"Leitner API returned {resp.status_code} for {method} {path}")
            raise ApiError(resp.status_code, str(detail))
        return resp.json()

    async def is_responsive(self) -> bool:
        """Check if the server answers its health endpoint."""
        try:
            resp = await self._client.get("/health")
            return resp.status_code == 200 and resp.json().get("status") == "ok"
        except Exception:
            return False

    async def create_card(
        self, owner: str, question: str, answer: str, category: str | None = None
    ) -> Card:
        body: dict[str, Any] = {"question": question, "answer": answer}
        if category is not None:
            body["category"] = category
        data = await self._request("POST", "/flashcards", owner, json=body)
        return card_from_payload(data)

    async def get_card(self, owner: str, card_id: str) -> Card:
        data = await self._request("GET", f"/flashcards/{card_id}", owner, card_id=card_id)
        return card_from_payload(data)

    async def list_cards(self, owner: str, category: str | None = None) -> list[Card]:
        params = {"category": category} if category else None
        data = await self._request("GET", "/flashcards", owner, params=params)
        return [card_from_payload(d) for d in data]

    async def list_due(self, owner: str) -> list[Card]:
        data = await self._request("GET", "/flashcards/due", owner)
        return [card_from_payload(d) for d in data]

    async def review_card(self, owner: str, card_id: str, is_correct: bool) -> Card:
        data = await self._request(
            "PATCH",
            f"/flashcards/{card_id}/review",
            owner,
            card_id=card_id,
            json={"isCorrect": is_correct},
        )
        return card_from_payload(data)

    async def update_card(
        self,
        owner: str,
        card_id: str,
        question: str | None = None,
        answer: str | None = None,
        category: str | None = None,
    ) -> Card:
        body = {"question": question, "answer": answer, "category": category}
        data = await self._request(
            "PUT",
            f"/flashcards/{card_id}",
            owner,
            card_id=card_id,
            json={k: v for k, v in body.items() if v is not None},
        )
        return card_from_payload(data)

    async def delete_card(self, owner: str, card_id: str) -> None:
        await self._request("DELETE", f"/flashcards/{card_id}", owner, card_id=card_id)

    async def get_summary(self, owner: str) -> StatsSnapshot:
        data = await self._request("GET", "/flashcards/stats/summary", owner)
        return snapshot_from_payload(data)

    async def sample_mastered(self, owner: str, limit: int = DEFAULT_QUIZ_SIZE) -> list[Card]:
        data = await self._request("GET", "/flashcards/mastered", owner, params={"limit": limit})
        return [card_from_payload(d) for d in data]

    async def build_quiz(self, owner: str, size: int = DEFAULT_QUIZ_SIZE) -> list[QuizQuestion]:
        data = await self._request("GET", "/flashcards/quiz", owner, params={"size": size})
        return [
            QuizQuestion(
                question=q["question"], correct_answer=q["correctAnswer"], options=q["options"]
            )
            for q in data
        ]
