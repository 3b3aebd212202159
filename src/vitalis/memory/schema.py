"""Pydantic models for the memory system."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MessageRole(StrEnum):
    """Who authored a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class UserRecord(BaseModel):
    """A provisioned user."""

    id: str
    created_at: datetime = Field(default_factory=_utcnow)


class MessageRecord(BaseModel):
    """One conversation turn belonging to a user."""

    id: int | None = None  # Auto-assigned by database
    user_id: str
    role: MessageRole
    content: str
    created_at: datetime = Field(default_factory=_utcnow)


class FactRecord(BaseModel):
    """A durable attribute extracted from something the user said."""

    id: int | None = None  # Auto-assigned by database
    user_id: str
    content: str
    created_at: datetime = Field(default_factory=_utcnow)
