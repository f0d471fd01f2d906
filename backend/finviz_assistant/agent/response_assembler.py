"""
Response assembly.

Every branch of a turn (clarify, data, general) converges here and comes out
as one AgentResponse plus the SessionDelta that records it.
"""

import structlog

from ..models.session import (
    FORMAT_OPTIONS,
    FinancialRecord,
    FormatType,
    Message,
    VisualizationRecord,
)
from .prompts import ASK_DATA_SUBJECT_TEXT, ASK_FORMAT_TEXT, DATA_CAPTION_TEMPLATE
from .state import AgentResponse, Route, SessionDelta, TurnDecision

logger = structlog.get_logger()

DEFAULT_QUERY_TEXT = "the requested data"


class ResponseAssembler:
    """Normalizes turn outcomes and builds the session delta."""

    def clarify(self, decision: TurnDecision) -> tuple[AgentResponse, SessionDelta]:
        """
        Clarify response for AskFormat / AskDataSubject.

        Pending values are set to whatever the resolver merged, and awaiting
        names the slot being asked for.
        """
        if decision.route is Route.ASK_FORMAT:
            response = AgentResponse(
                type="clarify", content=ASK_FORMAT_TEXT, options=list(FORMAT_OPTIONS)
            )
            awaiting = "format"
        elif decision.route is Route.ASK_DATA_SUBJECT:
            response = AgentResponse(type="clarify", content=ASK_DATA_SUBJECT_TEXT)
            awaiting = "data_subject"
        else:
            raise ValueError(f"Route {decision.route.value} is not a clarification")

        delta = SessionDelta(
            messages=[Message(role="bot", content=response.content)],
            pending_format=decision.resolved_format,
            pending_data_subject=decision.resolved_data_subject,
            awaiting=awaiting,
        )
        logger.info("Clarify response assembled", awaiting=awaiting)
        return response, delta

    def data(
        self,
        records: list[FinancialRecord],
        data_format: FormatType | None,
        query_text: str | None,
    ) -> tuple[AgentResponse, SessionDelta]:
        """
        Data response. Appends a visualization and clears pending state.

        Args:
            records: Synthesized records
            data_format: Resolved format (table when somehow absent)
            query_text: Last user utterance, quoted in the caption
        """
        resolved_format = data_format or FormatType.TABLE
        content = DATA_CAPTION_TEMPLATE.format(
            query=query_text or DEFAULT_QUERY_TEXT, format=resolved_format.value
        )
        response = AgentResponse(
            type="data", content=content, format=resolved_format, records=list(records)
        )
        delta = SessionDelta(
            messages=[Message(role="bot", content=content)],
            visualization=VisualizationRecord(
                format=resolved_format, records=list(records), caption=content
            ),
        )
        logger.info(
            "Data response assembled",
            format=resolved_format.value,
            record_count=len(records),
        )
        return response, delta

    def general(self, answer: str) -> tuple[AgentResponse, SessionDelta]:
        """General answer. Clears pending state; no visualization."""
        response = AgentResponse(type="general", content=answer)
        delta = SessionDelta(messages=[Message(role="bot", content=answer)])
        logger.info("General response assembled", answer_length=len(answer))
        return response, delta
