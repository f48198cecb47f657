"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.settings import (
    AppConfig,
    ChatConfig,
    DatabaseConfig,
    LLMConfig,
    ServerConfig,
)

DEFAULT_FALLBACK_REPLY = "Sorry, I don’t have information about that."


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.provider).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: Literal["google", "openai", "anthropic"] = Field(
        default="google",
        description="LLM provider to use",
    )

    # Google Gemini
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("gemini_api_key", "google_api_key"),
        description="Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model name",
    )

    # OpenAI
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model name",
    )

    # Anthropic
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Anthropic model name",
    )

    # App
    app_name: str = Field(
        default="support-chat",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version reported by the API",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Server port",
    )
    rate_limit: str = Field(
        default="100/15 minutes",
        description="Per-client request limit for all endpoints",
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./support_chat.db",
        description="Async database URL",
    )

    # Chat
    docs_path: Path = Field(
        default=Path("./data/docs.json"),
        description="Path to the documentation JSON file",
    )
    history_limit: int = Field(
        default=10,
        ge=0,
        le=50,
        description="Number of stored messages included in the prompt",
    )
    include_history: bool = Field(
        default=True,
        description="Include recent conversation history in the prompt",
    )
    fallback_reply: str = Field(
        default=DEFAULT_FALLBACK_REPLY,
        min_length=1,
        description="Reply used when no document matches or generation fails",
    )

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """LLM provider configuration."""
        return LLMConfig(
            provider=self.llm_provider,
            gemini_api_key=self.gemini_api_key,
            gemini_model=self.gemini_model,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            anthropic_api_key=self.anthropic_api_key,
            anthropic_model=self.anthropic_model,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            version=self.app_version,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            rate_limit=self.rate_limit,
            cors_origins=self.cors_origins,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def chat(self) -> ChatConfig:
        """Chat behaviour configuration."""
        return ChatConfig(
            docs_path=self.docs_path,
            history_limit=self.history_limit,
            include_history=self.include_history,
            fallback_reply=self.fallback_reply,
        )


# Global settings instance
settings = Settings()
