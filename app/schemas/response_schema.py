"""Shared API response schemas."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response with status, message, and error code."""

    status: int
    message: str
    code: str


class LivenessResponse(BaseModel):
    """Static payload of the liveness probe."""

    message: str
