"""Database connection configuration."""

from pydantic import BaseModel


class DatabaseConfig(BaseModel, frozen=True):
    """Database connection settings."""

    url: str

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured backend is SQLite."""
        return self.url.startswith("sqlite")
