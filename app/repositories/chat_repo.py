"""Chat repository for session and message database operations."""

from sqlalchemy import func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.chat_message import ChatMessage
from app.models.chat_session import ChatSession


class ChatRepository:
    """Encapsulates chat session and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_session(self, session_id: str) -> ChatSession | None:
        """Find a chat session by its identifier."""
        result = await self._session.execute(
            select(ChatSession).where(ChatSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def ensure_session(self, session_id: str) -> tuple[ChatSession, bool]:
        """Return the session with this id, creating it when absent.

        Uses INSERT OR IGNORE, so concurrent first messages for the same id
        never collide on the primary key.

        Returns:
            Tuple of (ChatSession, created).
        """
        result = await self._session.execute(
            sqlite_insert(ChatSession).values(id=session_id).on_conflict_do_nothing()
        )
        created = result.rowcount == 1  # type: ignore[attr-defined]
        found = await self._session.execute(
            select(ChatSession).where(ChatSession.id == session_id)
        )
        return found.scalar_one(), created

    async def touch_session(self, session_id: str) -> None:
        """Bump updated_at of a session to the current time."""
        await self._session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(updated_at=func.now())
        )

    async def list_sessions(self) -> list[ChatSession]:
        """List all sessions, most recently updated first."""
        result = await self._session.execute(
            select(ChatSession).order_by(
                ChatSession.updated_at.desc(),
                ChatSession.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def create_message(
        self,
        session_id: str,
        role: str,
        content: str,
    ) -> ChatMessage:
        """Append a single chat message."""
        message = ChatMessage(
            session_id=session_id,
            role=role,
            content=content,
        )
        self._session.add(message)
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def find_messages_by_session_id(self, session_id: str) -> list[ChatMessage]:
        """Retrieve all messages for a session in chronological order."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        return list(result.scalars().all())

    async def find_recent_messages(
        self, session_id: str, limit: int
    ) -> list[ChatMessage]:
        """Retrieve the last ``limit`` messages of a session, oldest first."""
        if limit <= 0:
            return []
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._session.commit()

    async def rollback(self) -> None:
        """Discard all pending writes of the current transaction."""
        await self._session.rollback()
