"""Chat behaviour configuration."""

from pathlib import Path

from pydantic import BaseModel


class ChatConfig(BaseModel, frozen=True):
    """Documentation source, prompt history and fallback settings."""

    docs_path: Path
    history_limit: int
    include_history: bool
    fallback_reply: str
