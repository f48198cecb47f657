"""Unit tests for ChatService."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import DEFAULT_FALLBACK_REPLY
from app.core.settings import ChatConfig
from app.models.chat_message import ChatMessage
from app.repositories.chat_repo import ChatRepository
from app.schemas.chat_schema import ChatRequest
from app.services.chat_service import (
    ChatService,
    GenerationError,
    build_prompt,
    extract_text,
    extract_token_usage,
)
from app.services.document_store import DocumentStore
from tests.conftest import SAMPLE_DOCUMENTS


@pytest.fixture
def chat_config(tmp_path) -> ChatConfig:
    return ChatConfig(
        docs_path=tmp_path / "docs.json",
        history_limit=10,
        include_history=True,
        fallback_reply=DEFAULT_FALLBACK_REPLY,
    )


@pytest.fixture
def chat_repo(db_session: AsyncSession) -> ChatRepository:
    return ChatRepository(db_session)


@pytest.fixture
def service(
    mock_llm: MagicMock,
    chat_repo: ChatRepository,
    document_store: DocumentStore,
    chat_config: ChatConfig,
) -> ChatService:
    return ChatService(
        llm_provider=lambda: mock_llm,
        chat_repo=chat_repo,
        document_store=document_store,
        config=chat_config,
    )


def _request(message: str, session_id: str = "s1") -> ChatRequest:
    return ChatRequest(session_id=session_id, message=message)


class TestBuildPrompt:
    """Tests for build_prompt."""

    def test_contains_documentation_history_and_question(self) -> None:
        history = [
            ChatMessage(session_id="s1", role="user", content="hi"),
            ChatMessage(session_id="s1", role="assistant", content="hello"),
        ]

        prompt = build_prompt(
            document=SAMPLE_DOCUMENTS[0],
            question="How do I reset my password?",
            history=history,
            fallback=DEFAULT_FALLBACK_REPLY,
        )

        assert SAMPLE_DOCUMENTS[0].content in prompt
        assert "user: hi\nassistant: hello" in prompt
        assert "How do I reset my password?" in prompt
        assert "ONLY using the documentation" in prompt
        assert DEFAULT_FALLBACK_REPLY in prompt

    def test_empty_history_placeholder(self) -> None:
        prompt = build_prompt(
            document=SAMPLE_DOCUMENTS[1],
            question="billing?",
            history=[],
            fallback="nope",
        )
        assert "Conversation History:\n(none)" in prompt


class TestExtractText:
    """Tests for extract_text and extract_token_usage."""

    def test_plain_string(self) -> None:
        assert extract_text(AIMessage(content="  Answer \n")) == "Answer"

    def test_content_blocks(self) -> None:
        message = AIMessage(
            content=[
                {"type": "text", "text": "Part one. "},
                {"type": "image_url", "image_url": "ignored"},
                "Part two.",
            ]
        )
        assert extract_text(message) == "Part one. Part two."

    def test_empty_content_raises(self) -> None:
        with pytest.raises(GenerationError):
            extract_text(AIMessage(content="   "))

    def test_token_usage(self) -> None:
        message = AIMessage(
            content="x",
            usage_metadata={"input_tokens": 3, "output_tokens": 4, "total_tokens": 7},
        )
        assert extract_token_usage(message) == 7

    def test_token_usage_missing(self) -> None:
        assert extract_token_usage(AIMessage(content="x")) == 0


class TestChat:
    """Tests for ChatService.chat."""

    @pytest.mark.asyncio
    async def test_matching_question_calls_llm(
        self,
        service: ChatService,
        mock_llm: MagicMock,
        chat_repo: ChatRepository,
    ) -> None:
        reply = await service.chat(_request("How do I reset my password?"))

        assert reply.reply == "Test response"
        assert reply.tokens_used == 42
        mock_llm.ainvoke.assert_awaited_once()
        prompt = mock_llm.ainvoke.call_args[0][0]
        assert SAMPLE_DOCUMENTS[0].content in prompt

        messages = await chat_repo.find_messages_by_session_id("s1")
        assert [(m.role, m.content) for m in messages] == [
            ("user", "How do I reset my password?"),
            ("assistant", "Test response"),
        ]

    @pytest.mark.asyncio
    async def test_no_match_returns_fallback_without_llm(
        self,
        service: ChatService,
        mock_llm: MagicMock,
        chat_repo: ChatRepository,
    ) -> None:
        reply = await service.chat(_request("What is the weather like?"))

        assert reply.reply == DEFAULT_FALLBACK_REPLY
        assert reply.tokens_used == 0
        mock_llm.ainvoke.assert_not_called()

        messages = await chat_repo.find_messages_by_session_id("s1")
        assert [m.role for m in messages] == ["user", "assistant"]
        assert messages[1].content == DEFAULT_FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_llm_error_returns_fallback_and_persists_it(
        self,
        service: ChatService,
        mock_llm: MagicMock,
        chat_repo: ChatRepository,
    ) -> None:
        mock_llm.ainvoke = AsyncMock(side_effect=RuntimeError("API down"))

        reply = await service.chat(_request("billing question"))

        assert reply.reply == DEFAULT_FALLBACK_REPLY
        messages = await chat_repo.find_messages_by_session_id("s1")
        assert messages[-1].role == "assistant"
        assert messages[-1].content == DEFAULT_FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_malformed_llm_response_returns_fallback(
        self,
        service: ChatService,
        mock_llm: MagicMock,
    ) -> None:
        mock_llm.ainvoke = AsyncMock(return_value=AIMessage(content=""))

        reply = await service.chat(_request("billing question"))

        assert reply.reply == DEFAULT_FALLBACK_REPLY
        assert reply.tokens_used == 0

    @pytest.mark.asyncio
    async def test_history_included_in_prompt(
        self,
        service: ChatService,
        mock_llm: MagicMock,
    ) -> None:
        await service.chat(_request("billing first"))
        await service.chat(_request("billing second"))

        prompt = mock_llm.ainvoke.call_args[0][0]
        assert "user: billing first" in prompt
        assert "assistant: Test response" in prompt

    @pytest.mark.asyncio
    async def test_history_limited(
        self,
        mock_llm: MagicMock,
        chat_repo: ChatRepository,
        document_store: DocumentStore,
        chat_config: ChatConfig,
    ) -> None:
        service = ChatService(
            llm_provider=lambda: mock_llm,
            chat_repo=chat_repo,
            document_store=document_store,
            config=chat_config.model_copy(update={"history_limit": 2}),
        )
        await service.chat(_request("billing one"))
        await service.chat(_request("billing two"))
        await service.chat(_request("billing three"))

        prompt = mock_llm.ainvoke.call_args[0][0]
        assert "billing one" not in prompt
        assert "user: billing two" in prompt

    @pytest.mark.asyncio
    async def test_history_disabled(
        self,
        mock_llm: MagicMock,
        chat_repo: ChatRepository,
        document_store: DocumentStore,
        chat_config: ChatConfig,
    ) -> None:
        service = ChatService(
            llm_provider=lambda: mock_llm,
            chat_repo=chat_repo,
            document_store=document_store,
            config=chat_config.model_copy(update={"include_history": False}),
        )
        await service.chat(_request("billing one"))
        await service.chat(_request("billing two"))

        prompt = mock_llm.ainvoke.call_args[0][0]
        assert "billing one" not in prompt
        assert "Conversation History:\n(none)" in prompt

    @pytest.mark.asyncio
    async def test_session_created_once(
        self,
        service: ChatService,
        chat_repo: ChatRepository,
    ) -> None:
        await service.chat(_request("billing"))
        await service.chat(_request("billing again"))

        sessions = await chat_repo.list_sessions()
        assert [s.id for s in sessions] == ["s1"]

    @pytest.mark.asyncio
    async def test_persistence_failure_still_returns_reply(
        self,
        document_store: DocumentStore,
        chat_config: ChatConfig,
        mock_llm: MagicMock,
    ) -> None:
        repo = MagicMock(spec=ChatRepository)
        repo.find_recent_messages = AsyncMock(return_value=[])
        repo.ensure_session = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("locked"))
        )
        repo.rollback = AsyncMock()
        service = ChatService(
            llm_provider=lambda: mock_llm,
            chat_repo=repo,
            document_store=document_store,
            config=chat_config,
        )

        reply = await service.chat(_request("billing"))

        assert reply.reply == "Test response"
        repo.rollback.assert_awaited_once()
        repo.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_history_failure_does_not_block_reply(
        self,
        document_store: DocumentStore,
        chat_config: ChatConfig,
        mock_llm: MagicMock,
    ) -> None:
        repo = MagicMock(spec=ChatRepository)
        repo.find_recent_messages = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("broken"))
        )
        repo.rollback = AsyncMock()
        repo.ensure_session = AsyncMock()
        repo.create_message = AsyncMock()
        repo.touch_session = AsyncMock()
        service = ChatService(
            llm_provider=lambda: mock_llm,
            chat_repo=repo,
            document_store=document_store,
            config=chat_config,
        )

        reply = await service.chat(_request("billing"))

        assert reply.reply == "Test response"
        assert repo.create_message.await_count == 2

    @pytest.mark.asyncio
    async def test_commit_failure_still_returns_reply(
        self,
        document_store: DocumentStore,
        chat_config: ChatConfig,
        mock_llm: MagicMock,
    ) -> None:
        repo = MagicMock(spec=ChatRepository)
        repo.find_recent_messages = AsyncMock(return_value=[])
        repo.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))
        )
        repo.rollback = AsyncMock()
        service = ChatService(
            llm_provider=lambda: mock_llm,
            chat_repo=repo,
            document_store=document_store,
            config=chat_config,
        )

        reply = await service.chat(_request("billing"))

        assert reply.reply == "Test response"
        repo.commit.assert_awaited_once()
        repo.rollback.assert_awaited_once()


class TestModelConstruction:
    """The model is only built when a document matched."""

    @pytest.fixture
    def failing_provider(self) -> MagicMock:
        return MagicMock(side_effect=ValueError("API key required"))

    @pytest.fixture
    def lazy_service(
        self,
        failing_provider: MagicMock,
        chat_repo: ChatRepository,
        document_store: DocumentStore,
        chat_config: ChatConfig,
    ) -> ChatService:
        return ChatService(
            llm_provider=failing_provider,
            chat_repo=chat_repo,
            document_store=document_store,
            config=chat_config,
        )

    @pytest.mark.asyncio
    async def test_no_match_never_builds_model(
        self, lazy_service: ChatService, failing_provider: MagicMock
    ) -> None:
        reply = await lazy_service.chat(_request("weather today?"))

        assert reply.reply == DEFAULT_FALLBACK_REPLY
        failing_provider.assert_not_called()

    @pytest.mark.asyncio
    async def test_construction_error_returns_fallback(
        self,
        lazy_service: ChatService,
        failing_provider: MagicMock,
        chat_repo: ChatRepository,
    ) -> None:
        reply = await lazy_service.chat(_request("billing question"))

        assert reply.reply == DEFAULT_FALLBACK_REPLY
        assert reply.tokens_used == 0
        failing_provider.assert_called_once()
        messages = await chat_repo.find_messages_by_session_id("s1")
        assert [(m.role, m.content) for m in messages] == [
            ("user", "billing question"),
            ("assistant", DEFAULT_FALLBACK_REPLY),
        ]
