"""Conversation history and session list schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MessageResponse(BaseModel):
    """Single message within a conversation."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    role: str
    content: str
    created_at: datetime


class SessionSummary(BaseModel):
    """Single entry of the session list."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    updated_at: datetime
