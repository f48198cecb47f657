"""Chat API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_chat_service
from app.schemas.chat_schema import ChatReply, ChatRequest
from app.schemas.response_schema import ErrorResponse
from app.services.chat_service import ChatService

router = APIRouter(prefix="/api/chat", tags=["chat"])

ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


@router.post(
    "",
    response_model=ChatReply,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def chat(request: ChatRequest, chat_service: ChatServiceDep) -> ChatReply:
    """Answer a support question from the documentation."""
    return await chat_service.chat(request)
