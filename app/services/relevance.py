"""Keyword overlap matching of a question against documentation titles."""

import re
from collections.abc import Iterable

from app.schemas.document_schema import Document

_NON_WORD = re.compile(r"[\W_]+")


def normalize(text: str) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    return _NON_WORD.sub(" ", text.lower()).strip()


def tokenize(text: str) -> list[str]:
    """Split text into normalized words."""
    return normalize(text).split()


def find_relevant_doc(
    question: str, documents: Iterable[Document]
) -> Document | None:
    """Return the first document whose title overlaps the question.

    A document matches when its normalized title occurs anywhere in the
    normalized question, or when any single word of its title is also a
    word of the question. Individual title words are compared whole, so
    "password" alone does not match "passwords". List order is the only
    tie-break.
    """
    normalized_question = normalize(question)
    if not normalized_question:
        return None
    question_tokens = set(normalized_question.split())

    for doc in documents:
        title = normalize(doc.title)
        if not title:
            continue
        if title in normalized_question:
            return doc
        if any(word in question_tokens for word in title.split()):
            return doc
    return None
