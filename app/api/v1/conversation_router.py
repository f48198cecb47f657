"""Conversation history and session list routers."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_conversation_service
from app.schemas.conversation_schema import MessageResponse, SessionSummary
from app.services.conversation_service import ConversationService

router = APIRouter(prefix="/api", tags=["conversations"])

ConversationServiceDep = Annotated[
    ConversationService, Depends(get_conversation_service)
]


@router.get(
    "/conversations/{session_id}",
    response_model=list[MessageResponse],
)
async def get_conversation(
    session_id: str,
    service: ConversationServiceDep,
) -> list[MessageResponse]:
    """List the messages of a session in chronological order."""
    return await service.get_messages(session_id)


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions(service: ConversationServiceDep) -> list[SessionSummary]:
    """List all sessions."""
    return await service.list_sessions()
