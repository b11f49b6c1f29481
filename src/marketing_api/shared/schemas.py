"""
Response envelope shared by every endpoint.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard ``{message, data?, error?, details?}`` envelope."""

    message: str = Field("", description="Human-readable outcome")
    data: T | None = Field(None, description="Payload on success")
    error: Any | None = Field(None, description="Error description on failure")
    details: dict[str, Any] | None = Field(None, description="Context for a client error")


def envelope(
    message: str = "",
    data: Any = None,
    error: Any = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build an envelope dict, omitting empty ``data``/``error``/``details`` keys."""
    body: dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    if details:
        body["details"] = details
    return body
