"""Chat service: match documentation, ask the model, persist the exchange."""

from collections.abc import Callable, Sequence
from typing import Any

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from sqlalchemy.exc import SQLAlchemyError

from app.core.settings import ChatConfig
from app.models.chat_message import ROLE_ASSISTANT, ROLE_USER, ChatMessage
from app.repositories.chat_repo import ChatRepository
from app.schemas.chat_schema import ChatReply, ChatRequest
from app.schemas.document_schema import Document
from app.services.document_store import DocumentStore
from app.services.relevance import find_relevant_doc

logger = structlog.get_logger()

PROMPT_TEMPLATE = (
    "You are a support assistant.\n\n"
    "STRICT RULES:\n"
    "1. Answer ONLY using the documentation provided below.\n"
    "2. Do NOT use external knowledge.\n"
    "3. If the answer is not in the documentation, reply exactly:\n"
    '"{fallback}"\n\n'
    "Documentation:\n"
    "{documentation}\n\n"
    "Conversation History:\n"
    "{history}\n\n"
    "User Question:\n"
    "{question}\n"
)


class GenerationError(Exception):
    """The model returned no usable text."""


def build_prompt(
    document: Document,
    question: str,
    history: Sequence[ChatMessage],
    fallback: str,
) -> str:
    """Build the constrained prompt sent to the model."""
    history_text = "\n".join(f"{msg.role}: {msg.content}" for msg in history)
    return PROMPT_TEMPLATE.format(
        fallback=fallback,
        documentation=document.content,
        history=history_text or "(none)",
        question=question,
    )


def extract_text(response: BaseMessage) -> str:
    """Extract plain text from a model response.

    Raises:
        GenerationError: If the response carries no text.
    """
    content: Any = response.content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        content = "".join(parts)
    if not isinstance(content, str) or not content.strip():
        raise GenerationError("Model response contained no text")
    return content.strip()


def extract_token_usage(response: BaseMessage) -> int:
    """Total tokens reported by the provider, 0 when not reported."""
    usage = getattr(response, "usage_metadata", None) or {}
    return int(usage.get("total_tokens", 0) or 0)


class ChatService:
    """Orchestrates a single support-chat exchange."""

    def __init__(
        self,
        llm_provider: Callable[[], BaseChatModel],
        chat_repo: ChatRepository,
        document_store: DocumentStore,
        config: ChatConfig,
    ) -> None:
        self._llm_provider = llm_provider
        self._chat_repo = chat_repo
        self._document_store = document_store
        self._config = config

    async def chat(self, request: ChatRequest) -> ChatReply:
        """Answer a question and record both sides of the exchange."""
        history = await self._load_history(request.session_id)

        document = find_relevant_doc(request.message, self._document_store)
        if document is None:
            logger.info("No matching documentation", session_id=request.session_id)
            reply = ChatReply(reply=self._config.fallback_reply)
        else:
            reply = await self._generate(request, document, history)

        await self._save_exchange(request.session_id, request.message, reply.reply)
        return reply

    async def _load_history(self, session_id: str) -> list[ChatMessage]:
        """Load recent messages for the prompt; empty when disabled or failing."""
        if not self._config.include_history:
            return []
        try:
            return await self._chat_repo.find_recent_messages(
                session_id, self._config.history_limit
            )
        except SQLAlchemyError:
            logger.exception("Failed to load history", session_id=session_id)
            await self._chat_repo.rollback()
            return []

    async def _generate(
        self,
        request: ChatRequest,
        document: Document,
        history: Sequence[ChatMessage],
    ) -> ChatReply:
        """Ask the model; any failure degrades to the fallback reply."""
        prompt = build_prompt(
            document=document,
            question=request.message,
            history=history,
            fallback=self._config.fallback_reply,
        )
        try:
            llm = self._llm_provider()
            response = await llm.ainvoke(prompt)
            text = extract_text(response)
        except Exception:
            logger.exception(
                "Generation failed",
                session_id=request.session_id,
                document=document.title,
            )
            return ChatReply(reply=self._config.fallback_reply)

        return ChatReply(reply=text, tokens_used=extract_token_usage(response))

    async def _save_exchange(
        self, session_id: str, question: str, answer: str
    ) -> None:
        """Persist session, question and answer together."""
        try:
            await self._chat_repo.ensure_session(session_id)
            await self._chat_repo.create_message(session_id, ROLE_USER, question)
            await self._chat_repo.create_message(session_id, ROLE_ASSISTANT, answer)
            await self._chat_repo.touch_session(session_id)
            await self._chat_repo.commit()
        except SQLAlchemyError:
            logger.exception("Failed to persist conversation", session_id=session_id)
            await self._chat_repo.rollback()
