"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.database import Base
from app.models.chat_message import ChatMessage  # noqa: F401
from app.models.chat_session import ChatSession  # noqa: F401
from app.schemas.document_schema import Document
from app.services.document_store import DocumentStore

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# --- Rate limiter ---


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Start every test with a fresh rate limit window."""
    from app.main import limiter

    limiter.reset()


# --- Documentation ---

SAMPLE_DOCUMENTS = [
    Document(
        title="Password Reset",
        content="Click 'Forgot password' on the login page to get a reset link.",
    ),
    Document(
        title="Billing",
        content="Invoices are issued monthly and can be downloaded in Settings.",
    ),
    Document(
        title="Account Deletion",
        content="Delete your account under Settings > Account.",
    ),
]


@pytest.fixture
def document_store() -> DocumentStore:
    """Document store with a few support articles."""
    return DocumentStore(SAMPLE_DOCUMENTS)


# --- Mock LLM ---


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM for testing."""
    mock = MagicMock(spec=BaseChatModel)
    mock.ainvoke = AsyncMock(
        return_value=AIMessage(
            content="Test response",
            usage_metadata={"input_tokens": 40, "output_tokens": 2, "total_tokens": 42},
        )
    )
    return mock


# --- App override & client fixtures ---


@pytest.fixture
async def async_client(
    mock_llm: MagicMock,
    document_store: DocumentStore,
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client backed by the test DB, sample docs and mock LLM."""
    from app.core.database import get_async_session
    from app.dependencies import get_document_store, get_llm_provider
    from app.main import app

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_llm_provider] = lambda: lambda: mock_llm
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --- DB session for tests ---


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session
