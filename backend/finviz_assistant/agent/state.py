"""
Turn-level state for the visualization agent.
Following Factor 5: Unified State Management.

These values live for a single turn. Only what SessionDelta writes back ever
reaches the session store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from ..models.session import (
    AwaitingSlot,
    FinancialRecord,
    FormatType,
    Message,
    Session,
    VisualizationRecord,
    utcnow,
)


class ResolverState(str, Enum):
    """Clarification state machine states."""

    NEED_FORMAT = "need_format"
    NEED_DATA_SUBJECT = "need_data_subject"
    READY = "ready"
    ANSWER_GENERAL = "answer_general"


class Route(str, Enum):
    """Where a turn goes after resolution."""

    ASK_FORMAT = "ask_format"
    ASK_DATA_SUBJECT = "ask_data_subject"
    FETCH = "fetch"
    ANSWER_GENERAL = "answer_general"


ROUTE_FOR_STATE: dict[ResolverState, Route] = {
    ResolverState.NEED_FORMAT: Route.ASK_FORMAT,
    ResolverState.NEED_DATA_SUBJECT: Route.ASK_DATA_SUBJECT,
    ResolverState.READY: Route.FETCH,
    ResolverState.ANSWER_GENERAL: Route.ANSWER_GENERAL,
}


@dataclass(frozen=True)
class IntentResult:
    """Structured reading of one user utterance."""

    is_data_request: bool
    format: FormatType | None = None
    data_subject: str | None = None
    # "model", "heuristic" or "selection"
    source: str = "model"


@dataclass(frozen=True)
class TurnInput:
    """What the client sent this turn. At most one field is expected to matter."""

    utterance: str | None = None
    format_selection: FormatType | None = None
    subject_selection: str | None = None

    @property
    def is_bare_selection(self) -> bool:
        """A button click or subject pick with no new typed message."""
        return not self.utterance and (
            self.format_selection is not None or bool(self.subject_selection)
        )


@dataclass(frozen=True)
class TurnDecision:
    """Resolver output: the route plus the merged slot values."""

    state: ResolverState
    resolved_format: FormatType | None = None
    resolved_data_subject: str | None = None

    @property
    def route(self) -> Route:
        return ROUTE_FOR_STATE[self.state]


ResponseType = Literal["clarify", "data", "general"]


class AgentResponse(BaseModel):
    """Normalized response returned to the client for every turn."""

    type: ResponseType = Field(..., description="clarify | data | general")
    content: str = Field("", description="Bot message text")
    format: FormatType | None = Field(None, description="Format for data responses")
    records: list[FinancialRecord] | None = Field(
        None, description="Records for data responses"
    )
    options: list[str] | None = Field(
        None, description="Selectable options for clarify responses"
    )


@dataclass
class SessionDelta:
    """
    Changes a turn makes to its session.

    Pending values are always written (None clears them), so a delta fully
    describes the clarification state after the turn.
    """

    messages: list[Message] = field(default_factory=list)
    visualization: VisualizationRecord | None = None
    pending_format: FormatType | None = None
    pending_data_subject: str | None = None
    awaiting: AwaitingSlot | None = None

    def apply_to(self, session: Session) -> Session:
        """Merge into the stored session in place; history only ever grows."""
        session.history.extend(self.messages)
        if self.visualization is not None:
            session.visualization_history.append(self.visualization)
        session.pending_format = self.pending_format
        session.pending_data_subject = self.pending_data_subject
        session.awaiting = self.awaiting
        session.updated_at = utcnow()
        return session


@dataclass
class TurnResult:
    """Everything one pipeline run produced."""

    decision: TurnDecision
    response: AgentResponse
    delta: SessionDelta
