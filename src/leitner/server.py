import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, StrictBool, StringConstraints
from pydantic.alias_generators import to_camel

from leitner.application.card_service import CardService
from leitner.application.config import AppConfig, resolve_config
from leitner.application.factory import get_card_service
from leitner.consts import VERSION
from leitner.domain.errors import CardNotFoundError, InvalidCardError
from leitner.domain.models import Card, QuizQuestion
from leitner.domain.stats.models import StatsSnapshot

logger = logging.getLogger("leitner.server")

NOT_FOUND = "Flashcard not found"

# Blank text is left to CardService, which rejects it with 400
Text = Annotated[str, StringConstraints(strip_whitespace=True)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class CardCreateRequest(CamelModel):
    question: Text
    answer: Text
    category: str | None = None


class CardUpdateRequest(CamelModel):
    question: Text | None = None
    answer: Text | None = None
    category: str | None = None


class ReviewRequest(CamelModel):
    # Rejects "true", 1 and friends before they reach the scheduler
    is_correct: StrictBool


class CardResponse(CamelModel):
    id: str
    question: str
    answer: str
    box: int
    next_review: datetime
    category: str
    user: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            question=card.question,
            answer=card.answer,
            box=card.box,
            next_review=card.next_review,
            category=card.category,
            user=card.owner,
            created_at=card.created_at,
            updated_at=card.updated_at,
        )


class BoxCountResponse(CamelModel):
    box: int
    count: int


class StatsSummaryResponse(CamelModel):
    total_cards: int
    due_today: int
    reviewed_today: int
    today_progress: int
    current_streak: int
    activity_data: dict[str, int]
    box_stats: list[BoxCountResponse]

    @classmethod
    def from_snapshot(cls, snapshot: StatsSnapshot) -> "StatsSummaryResponse":
        return cls(
            total_cards=snapshot.total_cards,
            due_today=snapshot.due_today,
            reviewed_today=snapshot.reviewed_today,
            today_progress=snapshot.today_progress,
            current_streak=snapshot.current_streak,
            activity_data=dict(snapshot.activity_by_date),
            box_stats=[BoxCountResponse(box=b.box, count=b.count) for b in snapshot.box_stats],
        )


class QuizQuestionResponse(CamelModel):
    question: str
    correct_answer: str
    options: list[str]

    @classmethod
    def from_question(cls, q: QuizQuestion) -> "QuizQuestionResponse":
        return cls(question=q.question, correct_answer=q.correct_answer, options=q.options)


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_service(request: Request) -> CardService:
    return request.app.state.card_service


def get_owner(request: Request, x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Owner from the X-User-Id header, else the configured default owner."""
    return x_user_id or request.app.state.config.default_owner


Service = Annotated[CardService, Depends(get_service)]
Owner = Annotated[str, Depends(get_owner)]


# ---------------------------------------------------------------------------
# Flashcard routes
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])


@router.post("", status_code=201, response_model=CardResponse)
async def create_card(req: CardCreateRequest, service: Service, owner: Owner):
    """Create a card in box 1, due now."""
    try:
        card = await service.create_card(owner, req.question, req.answer, req.category)
    except InvalidCardError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return CardResponse.from_card(card)


@router.get("", response_model=list[CardResponse])
async def list_cards(service: Service, owner: Owner, category: str | None = None):
    cards = await service.list_cards(owner, category)
    return [CardResponse.from_card(c) for c in cards]


@router.get("/due", response_model=list[CardResponse])
async def list_due(service: Service, owner: Owner):
    """
    Review queue: due cards, lowest box first.
    """
    cards = await service.list_due(owner)
    return [CardResponse.from_card(c) for c in cards]


@router.get("/stats/summary", response_model=StatsSummaryResponse)
async def stats_summary(service: Service, owner: Owner):
    try:
        snapshot = await service.get_summary(owner)
    except Exception as e:
        logger.error(f"Stats failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return StatsSummaryResponse.from_snapshot(snapshot)


@router.get("/mastered", response_model=list[CardResponse])
async def list_mastered(
    service: Service,
    owner: Owner,
    limit: Annotated[int, Query(ge=1)] = 10,
):
    """Random sample of box-5 cards for quiz mode."""
    cards = await service.sample_mastered(owner, limit)
    return [CardResponse.from_card(c) for c in cards]


@router.get("/quiz", response_model=list[QuizQuestionResponse])
async def build_quiz(
    request: Request,
    service: Service,
    owner: Owner,
    size: Annotated[int | None, Query(ge=1)] = None,
):
    size = size or request.app.state.config.quiz_size
    questions = await service.build_quiz(owner, size)
    return [QuizQuestionResponse.from_question(q) for q in questions]


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: str, service: Service, owner: Owner):
    try:
        card = await service.get_card(owner, card_id)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=NOT_FOUND) from e
    return CardResponse.from_card(card)


@router.patch("/{card_id}/review", response_model=CardResponse)
async def review_card(card_id: str, req: ReviewRequest, service: Service, owner: Owner):
    """
    Apply a review outcome: correct moves the card up one box, incorrect
    sends it back to box 1.
    """
    try:
        card = await service.review_card(owner, card_id, req.is_correct)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=NOT_FOUND) from e
    except Exception as e:
        logger.error(f"Review failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return CardResponse.from_card(card)


@router.put("/{card_id}", response_model=CardResponse)
async def update_card(card_id: str, req: CardUpdateRequest, service: Service, owner: Owner):
    try:
        card = await service.update_card(
            owner, card_id, question=req.question, answer=req.answer, category=req.category
        )
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=NOT_FOUND) from e
    except InvalidCardError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return CardResponse.from_card(card)


@router.delete("/{card_id}", response_model=MessageResponse)
async def delete_card(card_id: str, service: Service, owner: Owner):
    try:
        await service.delete_card(owner, card_id)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=NOT_FOUND) from e
    return MessageResponse(message="Flashcard deleted successfully")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Leitner Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("Leitner Server shutting down...")


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Build the HTTP app. All environment-specific values come from `config`.

    With no argument the configuration is resolved from file and environment,
    which is what `uvicorn --factory leitner.server:create_app` does.
    """
    config = config or resolve_config()
    logging.basicConfig(level=config.log_level)

    app = FastAPI(
        title="Leitner Server",
        description="Leitner-box spaced repetition flashcards.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-User-Id"],
    )

    app.state.config = config
    app.state.card_service = get_card_service(config)
    app.state.start_time = time.time()

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """
        Simple health check to verify server is reachable.
        """
        return HealthResponse(
            status="ok", version=VERSION, uptime_seconds=time.time() - app.state.start_time
        )

    app.include_router(router)
    return app
