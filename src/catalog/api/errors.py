"""Error responses for the catalog API.

Errors are returned as a Result holding one or more Messages:

    {"messages": [{"code": "BadRequest", "messageType": "Error", "text": "...", "timestamp": "..."}]}
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from catalog.core.model import InvalidCharacterError

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """Type of message in error response."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    EXCEPTION = "Exception"


class Message(BaseModel):
    """Single error message."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str | None = None


class Result(BaseModel):
    """Result wrapper for errors."""

    model_config = ConfigDict(extra="forbid")

    messages: list[Message]


def error_response(
    status_code: int, code: str, text: str, message_type: MessageType
) -> JSONResponse:
    result = Result(
        messages=[
            Message(
                code=code,
                messageType=message_type,
                text=text,
                timestamp=datetime.now(UTC).isoformat(),
            )
        ]
    )
    return JSONResponse(status_code=status_code, content=result.model_dump(by_alias=True))


async def invalid_character_handler(request: Request, exc: InvalidCharacterError) -> JSONResponse:
    """Domain validation failures map to 400."""
    return error_response(400, "BadRequest", str(exc), MessageType.ERROR)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors, cache and backend failures included."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(
        500, "InternalServerError", "An unexpected error occurred", MessageType.EXCEPTION
    )
