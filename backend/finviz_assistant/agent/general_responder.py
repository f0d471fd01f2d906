"""
General-question answering with a domain gate.

Stage one asks the model whether the question is IN_DOMAIN. Anything other
than an exact OUT_OF_DOMAIN verdict, including a failed call, lets the
question through. Stage two asks for a concise answer.
"""

from enum import Enum

import structlog

from .llm_client import TextGenerator
from .prompts import (
    GENERAL_ANSWER_FAILED_TEXT,
    OUT_OF_DOMAIN_TEXT,
    build_domain_gate_prompt,
    build_general_answer_prompt,
)

logger = structlog.get_logger()


class DomainStatus(str, Enum):
    IN_DOMAIN = "IN_DOMAIN"
    OUT_OF_DOMAIN = "OUT_OF_DOMAIN"


class GeneralResponder:
    """Answers questions outside the visualization intent, within the assistant's scope."""

    def __init__(self, llm: TextGenerator):
        self.llm = llm

    async def check_domain(self, utterance: str) -> DomainStatus:
        """Domain gate. Fails open to IN_DOMAIN."""
        try:
            reply = await self.llm.generate(build_domain_gate_prompt(utterance))
        except Exception as e:
            logger.warning(
                "Domain check failed, assuming IN_DOMAIN",
                error=str(e),
                error_type=type(e).__name__,
            )
            return DomainStatus.IN_DOMAIN

        verdict = reply.strip().strip(".\"'`").upper()
        if verdict == DomainStatus.OUT_OF_DOMAIN.value:
            return DomainStatus.OUT_OF_DOMAIN
        if verdict != DomainStatus.IN_DOMAIN.value:
            logger.warning(
                "Unrecognized domain verdict, defaulting to IN_DOMAIN",
                reply_preview=reply[:80],
            )
        return DomainStatus.IN_DOMAIN

    async def answer(self, utterance: str) -> str:
        """
        Answer a general question.

        Args:
            utterance: The user's question

        Returns:
            Model answer, the fixed refusal for out-of-domain questions,
            or the fixed apology when answering fails
        """
        status = await self.check_domain(utterance)
        logger.info("Domain check completed", domain_status=status.value)

        if status is DomainStatus.OUT_OF_DOMAIN:
            return OUT_OF_DOMAIN_TEXT

        try:
            answer = await self.llm.generate(build_general_answer_prompt(utterance))
        except Exception as e:
            logger.error(
                "General answer generation failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return GENERAL_ANSWER_FAILED_TEXT

        answer = answer.strip()
        if not answer:
            logger.warning("General answer was empty")
            return GENERAL_ANSWER_FAILED_TEXT
        return answer
