"""Domain-specific configuration models."""

from app.core.settings.app_config import AppConfig
from app.core.settings.chat_config import ChatConfig
from app.core.settings.database_config import DatabaseConfig
from app.core.settings.llm_config import LLMConfig
from app.core.settings.server_config import ServerConfig

__all__ = [
    "AppConfig",
    "ChatConfig",
    "DatabaseConfig",
    "LLMConfig",
    "ServerConfig",
]
