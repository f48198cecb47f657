"""Documentation entry schema."""

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """A single static documentation entry."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    content: str
