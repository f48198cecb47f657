"""Read-only access to stored conversations and sessions."""

import structlog
from sqlalchemy.exc import SQLAlchemyError

from app.repositories.chat_repo import ChatRepository
from app.schemas.conversation_schema import MessageResponse, SessionSummary

logger = structlog.get_logger()


class ConversationService:
    """Lists messages and sessions; query failures yield empty results."""

    def __init__(self, chat_repo: ChatRepository) -> None:
        self._chat_repo = chat_repo

    async def get_messages(self, session_id: str) -> list[MessageResponse]:
        """Return the messages of a session in chronological order."""
        try:
            messages = await self._chat_repo.find_messages_by_session_id(session_id)
        except SQLAlchemyError:
            logger.exception("Failed to load conversation", session_id=session_id)
            return []
        return [MessageResponse.model_validate(msg) for msg in messages]

    async def list_sessions(self) -> list[SessionSummary]:
        """Return every known session, most recently updated first."""
        try:
            sessions = await self._chat_repo.list_sessions()
        except SQLAlchemyError:
            logger.exception("Failed to list sessions")
            return []
        return [SessionSummary.model_validate(s) for s in sessions]
