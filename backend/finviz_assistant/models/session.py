"""
Session models for visualization chats.
Everything a session remembers: the transcript, the visualizations it
produced, and any clarification still outstanding.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class FormatType(str, Enum):
    """Rendering formats the frontend understands."""

    TABLE = "table"
    CHART = "chart"
    LIST = "list"

    @classmethod
    def parse(cls, value: object) -> "FormatType | None":
        """Return the matching format, or None for anything outside the closed set."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


FORMAT_OPTIONS: list[str] = [f.value for f in FormatType]

AwaitingSlot = Literal["format", "data_subject"]


class Message(BaseModel):
    """Single chat message. Immutable once appended to a session."""

    role: Literal["user", "bot"] = Field(..., description="Message author")
    content: str = Field(..., description="Message text")
    timestamp: datetime | None = Field(
        default_factory=utcnow, description="When the message was appended"
    )

    model_config = {"frozen": True}


class FinancialRecord(BaseModel):
    """One stock-like data point."""

    symbol: str = Field(..., min_length=1, description="Ticker symbol")
    price: float = Field(..., ge=0, description="Price, 2 decimal places")
    volume: int = Field(..., ge=0, description="Traded volume")

    model_config = {"frozen": True}

    @field_validator("price")
    @classmethod
    def round_price(cls, value: float) -> float:
        return round(value, 2)


class VisualizationRecord(BaseModel):
    """A rendered dataset kept in the session's visualization history."""

    format: FormatType = Field(..., description="How the records were rendered")
    records: list[FinancialRecord] = Field(default_factory=list)
    caption: str = Field("", description="Bot message shown with the data")
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}


class Session(BaseModel):
    """
    Per-session state owned by the session store.

    pending_format / pending_data_subject carry clarification answers across
    turns; awaiting names the slot the last clarify response asked for.
    All three are cleared when a data or general turn completes.
    """

    session_id: str = Field(..., description="Opaque session identifier")
    history: list[Message] = Field(default_factory=list)
    visualization_history: list[VisualizationRecord] = Field(default_factory=list)
    pending_format: FormatType | None = None
    pending_data_subject: str | None = None
    awaiting: AwaitingSlot | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def last_user_message(self) -> str | None:
        """Content of the most recent user message, if any."""
        for message in reversed(self.history):
            if message.role == "user":
                return message.content
        return None

    @property
    def has_pending_clarification(self) -> bool:
        return self.awaiting is not None

    def add_message(self, role: Literal["user", "bot"], content: str) -> Message:
        """Append a message and bump updated_at."""
        message = Message(role=role, content=content)
        self.history.append(message)
        self.updated_at = utcnow()
        return message

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": "3f7c1e9a-8d4b-4a51-9b0e-2f6c7d1a5e42",
                "history": [
                    {"role": "user", "content": "show me AAPL"},
                    {
                        "role": "bot",
                        "content": "Please specify the format you would like: table, chart, or list.",
                    },
                ],
                "visualization_history": [],
                "pending_format": None,
                "pending_data_subject": "AAPL",
                "awaiting": "format",
            }
        }
