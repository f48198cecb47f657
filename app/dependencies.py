"""Global dependencies for the application."""

from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends, Request
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_async_session
from app.core.exceptions import DocumentStoreError
from app.repositories.chat_repo import ChatRepository
from app.services.chat_service import ChatService
from app.services.conversation_service import ConversationService
from app.services.document_store import DocumentStore


@lru_cache
def get_llm() -> BaseChatModel:
    """Get the LLM instance based on the configured provider."""
    llm_config = settings.llm
    match llm_config.provider:
        case "google":
            return ChatGoogleGenerativeAI(
                model=llm_config.gemini_model,
                google_api_key=llm_config.gemini_api_key,
            )
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=llm_config.openai_api_key,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=llm_config.anthropic_api_key,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


def get_llm_provider() -> Callable[[], BaseChatModel]:
    """Get the model factory; the model is built on first generation."""
    return get_llm


def get_document_store(request: Request) -> DocumentStore:
    """Get the document store loaded at startup."""
    store = getattr(request.app.state, "document_store", None)
    if store is None:
        raise DocumentStoreError(message="Documentation is not loaded")
    return store


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_chat_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    document_store: DocumentStore = Depends(get_document_store),
    llm_provider: Callable[[], BaseChatModel] = Depends(get_llm_provider),
) -> ChatService:
    """Get ChatService with persistence, documentation and model."""
    return ChatService(
        llm_provider=llm_provider,
        chat_repo=chat_repo,
        document_store=document_store,
        config=settings.chat,
    )


def get_conversation_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
) -> ConversationService:
    """Get ConversationService bound to the current session."""
    return ConversationService(chat_repo=chat_repo)
