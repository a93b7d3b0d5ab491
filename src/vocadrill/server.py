import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field, model_validator

from vocadrill.application.review_service import ReviewService
from vocadrill.consts import VERSION
from vocadrill.domain.errors import DuplicateItemError, StorageError
from vocadrill.domain.review.models import Confidence, FlashcardRating

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("vocadrill.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"vocadrill server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("vocadrill server shutting down...")


app = FastAPI(
    title="vocadrill Server",
    description="Review scheduling and study statistics for the vocabulary front ends.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


def get_review_service(request: Request) -> ReviewService:
    """Build the service once per app from the resolved config."""
    service = getattr(request.app.state, "review_service", None)
    if service is None:
        from vocadrill.application.config import resolve_config
        from vocadrill.application.factory import get_review_repository

        config = resolve_config()
        service = ReviewService(get_review_repository(config), config)
        request.app.state.review_service = service
    return service


ServiceDep = Annotated[ReviewService, Depends(get_review_service)]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ReviewItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    term: str
    definition: str
    ease_factor: float
    interval_days: int
    repetitions: int
    lapses: int
    last_reviewed: datetime | None
    next_review: datetime | None


class CreateItemRequest(BaseModel):
    term: str = Field(min_length=1)
    definition: str = Field(min_length=1)
    id: str | None = None


class ReviewRequest(BaseModel):
    """
    One answer for an item. Exactly one input style must be used:
    a raw quality, a flashcard rating, or a quiz result with confidence.
    """

    quality: int | None = None
    rating: FlashcardRating | None = None
    is_correct: bool | None = None
    confidence: Confidence = Confidence.LOW

    @model_validator(mode="after")
    def exactly_one_input(self):
        given = [v for v in (self.quality, self.rating, self.is_correct) if v is not None]
        if len(given) != 1:
            raise ValueError("Provide exactly one of quality, rating or is_correct")
        return self


class SessionRequest(BaseModel):
    items_studied: int = Field(ge=0)
    correct_answers: int = Field(ge=0)
    average_quality: float = Field(ge=0, le=5)
    mode: str = "flashcard"
    date: datetime | None = None


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    items_studied: int
    correct_answers: int
    average_quality: float
    mode: str


class StatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_reviews: int
    correct_reviews: int
    average_quality: float
    study_streak: int
    mastered_items: int
    items_to_review: int
    estimated_time: int
    total_items: int
    overdue_items: int
    learning_items: int
    average_ease_factor: float
    average_interval: float
    success_rate: float
    longest_streak: int


def _storage_failure(action: str, e: StorageError) -> HTTPException:
    logger.error(f"{action} failed: {e}")
    return HTTPException(status_code=503, detail=str(e))


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/items", response_model=list[ReviewItemResponse])
async def list_items(service: ServiceDep):
    try:
        items = await service.list_items()
    except StorageError as e:
        raise _storage_failure("List items", e) from e
    return [ReviewItemResponse.model_validate(item) for item in items]


@app.post("/items", response_model=ReviewItemResponse, status_code=201)
async def create_item(req: CreateItemRequest, service: ServiceDep):
    try:
        item = await service.add_term(req.term, req.definition, item_id=req.id)
    except DuplicateItemError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except StorageError as e:
        raise _storage_failure("Create item", e) from e
    return ReviewItemResponse.model_validate(item)


@app.get("/items/{item_id}", response_model=ReviewItemResponse)
async def get_item(item_id: str, service: ServiceDep):
    try:
        item = await service.get_item(item_id)
    except StorageError as e:
        raise _storage_failure("Get item", e) from e
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item '{item_id}' not found")
    return ReviewItemResponse.model_validate(item)


@app.delete("/items/{item_id}")
async def delete_item(item_id: str, service: ServiceDep):
    try:
        removed = await service.remove_term(item_id)
    except StorageError as e:
        raise _storage_failure("Delete item", e) from e
    if not removed:
        raise HTTPException(status_code=404, detail=f"Item '{item_id}' not found")
    return {"ok": True}


@app.post("/items/{item_id}/review", response_model=ReviewItemResponse)
async def review_item(item_id: str, req: ReviewRequest, service: ServiceDep):
    """Schedule an item after one answer."""
    try:
        if req.quality is not None:
            updated = await service.record_review(item_id, req.quality)
        elif req.rating is not None:
            updated = await service.record_flashcard(item_id, req.rating)
        else:
            updated = await service.record_quiz_answer(item_id, bool(req.is_correct), req.confidence)
    except StorageError as e:
        raise _storage_failure("Review", e) from e

    if updated is None:
        raise HTTPException(status_code=404, detail=f"Item '{item_id}' not found")
    return ReviewItemResponse.model_validate(updated)


@app.get("/due", response_model=list[ReviewItemResponse])
async def due_items(service: ServiceDep, limit: Annotated[int | None, Query(ge=0)] = None):
    try:
        items = await service.get_due_items(limit)
    except StorageError as e:
        raise _storage_failure("Due selection", e) from e
    return [ReviewItemResponse.model_validate(item) for item in items]


@app.get("/stats", response_model=StatisticsResponse)
async def statistics(service: ServiceDep):
    try:
        result = await service.get_statistics()
    except StorageError as e:
        raise _storage_failure("Statistics", e) from e
    return StatisticsResponse.model_validate(result)


@app.get("/sessions", response_model=list[SessionResponse])
async def list_sessions(service: ServiceDep):
    try:
        sessions = await service.get_study_history()
    except StorageError as e:
        raise _storage_failure("Study history", e) from e
    return [SessionResponse.model_validate(s) for s in sessions]


@app.post("/sessions", response_model=SessionResponse, status_code=201)
async def add_session(req: SessionRequest, service: ServiceDep):
    if req.correct_answers > req.items_studied:
        raise HTTPException(
            status_code=422, detail="correct_answers cannot exceed items_studied"
        )
    try:
        session = await service.log_session(
            items_studied=req.items_studied,
            correct_answers=req.correct_answers,
            average_quality=req.average_quality,
            mode=req.mode,
            date=req.date,
        )
    except StorageError as e:
        raise _storage_failure("Log session", e) from e
    return SessionResponse.model_validate(session)
