"""
Pydantic models for persisted session state.
Provides type safety and validation for the session store and API.
"""

from .session import (
    FORMAT_OPTIONS,
    FinancialRecord,
    FormatType,
    Message,
    Session,
    VisualizationRecord,
    utcnow,
)

__all__ = [
    "FORMAT_OPTIONS",
    "FinancialRecord",
    "FormatType",
    "Message",
    "Session",
    "VisualizationRecord",
    "utcnow",
]
