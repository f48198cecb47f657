"""Read-only store of documentation entries loaded from a JSON file."""

from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from app.core.exceptions import DocumentStoreError
from app.schemas.document_schema import Document

logger = structlog.get_logger()

_documents_adapter = TypeAdapter(list[Document])


class DocumentStore:
    """Immutable, ordered collection of documentation entries."""

    def __init__(self, documents: Iterable[Document]) -> None:
        self._documents = tuple(documents)

    @classmethod
    def from_file(cls, path: Path) -> "DocumentStore":
        """Load a JSON array of ``{title, content}`` objects.

        Raises:
            DocumentStoreError: If the file is missing, unreadable or malformed.
        """
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise DocumentStoreError(
                message=f"Cannot read documentation file {path}: {exc}"
            ) from exc

        try:
            documents = _documents_adapter.validate_json(raw)
        except ValidationError as exc:
            raise DocumentStoreError(
                message=f"Invalid documentation file {path}: "
                f"{exc.error_count()} error(s)"
            ) from exc

        logger.info("Documentation loaded", path=str(path), count=len(documents))
        return cls(documents)

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)
