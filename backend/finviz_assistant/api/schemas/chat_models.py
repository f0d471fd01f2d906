"""
Request/Response models for the message API.
"""

from pydantic import BaseModel, Field

from ...agent.state import AgentResponse
from ...models.session import Message, VisualizationRecord

# ===== Request Models =====


class PostTurnRequest(BaseModel):
    """One chat turn. Normally exactly one of message/selection/data_query is set."""

    message: str | None = Field(
        None, max_length=10000, description="New user utterance"
    )
    session_id: str | None = Field(
        None, description="Session to continue (absent or unknown starts a new one)"
    )
    selection: str | None = Field(
        None, description="Format picked from clarify options: table, chart or list"
    )
    data_query: str | None = Field(
        None,
        max_length=1000,
        description="Data subject answering a clarification (company, sector, metric)",
    )


class DeleteSessionRequest(BaseModel):
    """Reset request. session_id is checked by the endpoint for a 400 response."""

    session_id: str | None = Field(None, description="Session to delete")


# ===== Response Models =====


class HistoryResponse(BaseModel):
    """Session transcript and visualization history."""

    history: list[Message] = Field(default_factory=list)
    visualization_history: list[VisualizationRecord] = Field(default_factory=list)


class TurnResponse(HistoryResponse):
    """Response to a posted turn."""

    session_id: str
    response: AgentResponse


class DeleteResponse(BaseModel):
    """Session deletion acknowledgement."""

    message: str
