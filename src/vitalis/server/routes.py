"""API routes for the Vitalis server."""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from vitalis import __version__
from vitalis.agent.generator import ResponseGenerator
from vitalis.memory.storage import MemoryStorage, StorageError

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "AI Health Backend is Running"
MISSING_FIELDS_ERROR = "Missing userId or message"


class CreateUserResponse(BaseModel):
    """Response body for user creation."""

    userId: str
    status: str = "created"


class ChatRequest(BaseModel):
    """Request body for chat endpoint.

    Both fields are optional here so a missing field is reported as a 400
    with a fixed message rather than a schema error.
    """

    userId: str | None = None
    message: str | None = None


class ChatResponse(BaseModel):
    """Response body for chat endpoint."""

    response: str


class FactResponse(BaseModel):
    """One stored fact as returned by the memory endpoint."""

    id: int
    userId: str
    content: str
    createdAt: datetime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    model: str
    version: str


def create_router(
    storage: MemoryStorage,
    generator: ResponseGenerator,
) -> APIRouter:
    """Create API router backed by the given services.

    Args:
        storage: Persistence gateway
        generator: Chat response generator

    Returns:
        Configured API router
    """
    router = APIRouter()

    @router.get("/", response_class=PlainTextResponse)
    async def liveness() -> str:
        """Liveness probe."""
        return LIVENESS_TEXT

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            model=generator.llm.model,
            version=__version__,
        )

    @router.post("/api/user", response_model=CreateUserResponse)
    async def create_user() -> CreateUserResponse:
        """Provision a new user."""
        try:
            user = storage.create_user()
        except StorageError:
            logger.exception("Failed to create user")
            raise HTTPException(status_code=500, detail="Database error creating user") from None

        logger.info("Created user %s", user.id)
        return CreateUserResponse(userId=user.id)

    @router.post("/api/chat", response_model=ChatResponse)
    async def chat(request: ChatRequest) -> ChatResponse:
        """Answer one user message.

        Args:
            request: Chat request with user ID and message

        Returns:
            Chat response (a fallback answer if the chat model is down)
        """
        if not request.userId or not request.message:
            raise HTTPException(status_code=400, detail=MISSING_FIELDS_ERROR)

        try:
            response = await generator.generate(request.userId, request.message)
        except Exception:
            logger.exception("Chat processing failed for user %s", request.userId)
            raise HTTPException(status_code=500, detail="AI processing failed") from None

        return ChatResponse(response=response)

    @router.get("/api/memory/{user_id}", response_model=list[FactResponse])
    async def get_memory(user_id: str) -> list[FactResponse]:
        """List what the assistant knows about a user.

        Unknown users simply have no facts.
        """
        try:
            facts = storage.list_facts(user_id)
        except StorageError:
            logger.exception("Failed to load facts for user %s", user_id)
            raise HTTPException(status_code=500, detail="Database error loading memory") from None

        return [
            FactResponse(
                id=fact.id,
                userId=fact.user_id,
                content=fact.content,
                createdAt=fact.created_at,
            )
            for fact in facts
        ]

    return router
