"""API request/response schemas."""

from .chat_models import (
    DeleteResponse,
    DeleteSessionRequest,
    HistoryResponse,
    PostTurnRequest,
    TurnResponse,
)

__all__ = [
    "DeleteResponse",
    "DeleteSessionRequest",
    "HistoryResponse",
    "PostTurnRequest",
    "TurnResponse",
]
