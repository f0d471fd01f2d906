"""
Clarification state machine.

Each turn lands in exactly one state:

    AnswerGeneral     classifier saw a general question
    Ready             format and data subject both known -> fetch data
    NeedFormat        format missing (asked first, with options)
    NeedDataSubject   format known, subject missing (free-text question)

Slot precedence when merging a turn onto pending state:
    explicit selection > classifier value from this utterance
    > free-text answer to the awaited slot > pending value
A turn that carries no new signal for a slot never overwrites it.
"""

import structlog

from ..models.session import FormatType, Session
from .intent_classifier import QUESTION_PATTERN, format_from_text
from .state import IntentResult, ResolverState, TurnDecision, TurnInput

logger = structlog.get_logger()


class ClarificationResolver:
    """Computes the turn's state from intent, explicit selections and pending state."""

    def resolve(
        self, intent: IntentResult, turn: TurnInput, session: Session
    ) -> TurnDecision:
        """
        Resolve one turn.

        Args:
            intent: Classifier output for this turn
            turn: Client input (utterance / explicit selections)
            session: Snapshot carrying pending_format, pending_data_subject, awaiting

        Returns:
            TurnDecision with the state and merged slot values
        """
        utterance = (turn.utterance or "").strip()
        answering = bool(utterance) and session.has_pending_clarification

        if not intent.is_data_request:
            if answering and not QUESTION_PATTERN.search(utterance):
                logger.info(
                    "Treating free text as clarification answer",
                    awaiting=session.awaiting,
                )
            else:
                decision = TurnDecision(state=ResolverState.ANSWER_GENERAL)
                self._log(decision, intent)
                return decision

        data_format = self._merge_format(intent, turn, session, answering, utterance)
        subject = self._merge_subject(intent, turn, session, answering, utterance)

        if data_format is not None and subject is not None:
            state = ResolverState.READY
        elif subject is not None:
            state = ResolverState.NEED_FORMAT
        elif data_format is not None:
            state = ResolverState.NEED_DATA_SUBJECT
        else:
            state = ResolverState.NEED_FORMAT

        decision = TurnDecision(
            state=state, resolved_format=data_format, resolved_data_subject=subject
        )
        self._log(decision, intent)
        return decision

    @staticmethod
    def _merge_format(
        intent: IntentResult,
        turn: TurnInput,
        session: Session,
        answering: bool,
        utterance: str,
    ) -> FormatType | None:
        if turn.format_selection is not None:
            return turn.format_selection
        if intent.format is not None:
            return intent.format
        if answering and session.awaiting == "format":
            typed = format_from_text(utterance)
            if typed is not None:
                return typed
        return session.pending_format

    @staticmethod
    def _merge_subject(
        intent: IntentResult,
        turn: TurnInput,
        session: Session,
        answering: bool,
        utterance: str,
    ) -> str | None:
        selected = (turn.subject_selection or "").strip()
        if selected:
            return selected
        if intent.data_subject:
            return intent.data_subject
        if (
            answering
            and session.awaiting == "data_subject"
            and format_from_text(utterance) is None
        ):
            return utterance
        return session.pending_data_subject

    @staticmethod
    def _log(decision: TurnDecision, intent: IntentResult) -> None:
        logger.info(
            "Clarification resolved",
            state=decision.state.value,
            route=decision.route.value,
            intent_source=intent.source,
            resolved_format=(
                decision.resolved_format.value if decision.resolved_format else None
            ),
            resolved_data_subject=decision.resolved_data_subject,
        )
