"""HTTP client for the support-chat backend used by the Streamlit UI."""

import os
from typing import Any

import requests
import structlog

logger = structlog.get_logger()

# Backend URL - override with env
API_BASE = os.environ.get("SUPPORT_CHAT_API_URL", "http://localhost:5000")


class SupportChatClient:
    """Thin wrapper over the backend REST endpoints."""

    def __init__(self, base_url: str = API_BASE, timeout: float = 60) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_conversation(self, session_id: str) -> list[dict[str, Any]]:
        """Stored messages of a session; empty on any error."""
        try:
            r = requests.get(
                f"{self.base_url}/api/conversations/{session_id}",
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError):
            logger.exception("Conversation fetch failed", session_id=session_id)
            return []
        return data if isinstance(data, list) else []

    def fetch_sessions(self) -> list[dict[str, Any]]:
        """Known sessions; empty on any error."""
        try:
            r = requests.get(f"{self.base_url}/api/sessions", timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError):
            logger.exception("Session list fetch failed")
            return []
        return data if isinstance(data, list) else []

    def send_message(self, session_id: str, message: str) -> str | None:
        """Post a question and return the reply, or None if the call failed."""
        try:
            r = requests.post(
                f"{self.base_url}/api/chat",
                json={"sessionId": session_id, "message": message},
                timeout=self.timeout,
            )
            r.raise_for_status()
            return r.json()["reply"]
        except (requests.RequestException, ValueError, KeyError, TypeError):
            logger.exception("Chat request failed", session_id=session_id)
            return None
