"""
Turn pipeline for the visualization assistant.

    classify -> resolve -> (clarify | synthesize data | answer question) -> assemble

The node set and edges are fixed, so routing is a plain dispatch on the
resolver's state instead of a graph runtime. The pipeline reads a snapshot of
the session and returns a SessionDelta; it never mutates stored state.
"""

import structlog

from ..models.session import Session
from .clarification import ClarificationResolver
from .data_synthesizer import DataSynthesizer
from .general_responder import GeneralResponder
from .intent_classifier import IntentClassifier
from .response_assembler import ResponseAssembler
from .state import IntentResult, Route, TurnInput, TurnResult

logger = structlog.get_logger()


class TurnPipeline:
    """
    Runs one chat turn to completion.

    Model failures never escape: each component has its own fallback. Any
    other exception propagates to the caller, which owns error reporting.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        resolver: ClarificationResolver,
        synthesizer: DataSynthesizer,
        responder: GeneralResponder,
        assembler: ResponseAssembler,
    ):
        self.classifier = classifier
        self.resolver = resolver
        self.synthesizer = synthesizer
        self.responder = responder
        self.assembler = assembler

    async def run(self, session: Session, turn: TurnInput) -> TurnResult:
        """
        Process a turn against a session snapshot.

        Args:
            session: Current session state (copied, not mutated)
            turn: This turn's client input

        Returns:
            TurnResult with decision, normalized response and session delta
        """
        snapshot = session.model_copy(deep=True)
        utterance = (turn.utterance or snapshot.last_user_message or "").strip()

        logger.info(
            "Turn started",
            session_id=snapshot.session_id,
            has_utterance=bool(turn.utterance),
            format_selection=(
                turn.format_selection.value if turn.format_selection else None
            ),
            subject_selection=turn.subject_selection,
            pending_format=(
                snapshot.pending_format.value if snapshot.pending_format else None
            ),
            pending_data_subject=snapshot.pending_data_subject,
            awaiting=snapshot.awaiting,
        )

        if turn.is_bare_selection:
            # Selections answer the outstanding clarification; nothing to classify
            intent = IntentResult(is_data_request=True, source="selection")
        else:
            intent = await self.classifier.classify(utterance)

        decision = self.resolver.resolve(intent, turn, snapshot)

        if decision.route in (Route.ASK_FORMAT, Route.ASK_DATA_SUBJECT):
            response, delta = self.assembler.clarify(decision)
        elif decision.route is Route.FETCH:
            records = await self.synthesizer.synthesize(decision.resolved_data_subject)
            response, delta = self.assembler.data(
                records, decision.resolved_format, snapshot.last_user_message
            )
        else:
            answer = await self.responder.answer(utterance)
            response, delta = self.assembler.general(answer)

        logger.info(
            "Turn completed",
            session_id=snapshot.session_id,
            route=decision.route.value,
            response_type=response.type,
        )
        return TurnResult(decision=decision, response=response, delta=delta)
