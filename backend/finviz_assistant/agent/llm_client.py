"""
LangChain-based LLM client wrapper for Qwen models.

Uses ChatTongyi (langchain-community) via Alibaba Cloud DashScope. The agent
only needs one capability from the model: turn a prompt into text. Every
failure (network, quota, timeout, empty reply) is normalized into
ExternalServiceError so callers can apply their fallbacks uniformly.
"""

import asyncio
from dataclasses import dataclass
from typing import Protocol

import structlog
from langchain_community.chat_models import ChatTongyi
from langchain_core.messages import HumanMessage

from ..core.config import Settings
from ..core.exceptions import ExternalServiceError

logger = structlog.get_logger()


class TextGenerator(Protocol):
    """Anything that can turn a prompt into text. Tests inject fakes."""

    async def generate(self, prompt: str) -> str: ...


@dataclass
class TokenUsage:
    """Token usage information from LLM API."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


class DashScopeClient:
    """
    LangChain-based client for Qwen models via DashScope.

    Single-prompt, non-streaming completion with a hard timeout.
    """

    def __init__(self, settings: Settings, model: str | None = None):
        """
        Initialize LangChain chat model client.

        Args:
            settings: Application settings with API key, model and timeout
            model: Model ID override (defaults to settings.default_llm_model)
        """
        self.settings = settings
        self.model = model or settings.default_llm_model
        self.timeout_seconds = settings.llm_timeout_seconds

        self.chat = ChatTongyi(  # type: ignore[call-arg]  # LangChain stubs incomplete
            model_name=self.model,
            dashscope_api_key=settings.dashscope_api_key,
            streaming=False,
            model_kwargs={"result_format": "message"},
        )
        logger.info("ChatTongyi client initialized", model=self.model)

        # Track last token usage for cost logging
        self.last_token_usage: TokenUsage | None = None

    async def generate(self, prompt: str) -> str:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: Full instruction prompt

        Returns:
            Reply text (stripped)

        Raises:
            ExternalServiceError: On timeout, API failure or empty reply
        """
        chat_with_params = self.chat.bind(
            temperature=self.settings.default_llm_temperature,
            max_tokens=self.settings.llm_max_tokens,
        )

        try:
            result = await asyncio.wait_for(
                chat_with_params.ainvoke([HumanMessage(content=prompt)]),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                "LLM call timed out",
                model=self.model,
                timeout_seconds=self.timeout_seconds,
            )
            raise ExternalServiceError(
                f"Model call timed out after {self.timeout_seconds}s",
                service="dashscope",
                model=self.model,
            ) from e
        except Exception as e:
            logger.error(
                "LLM call failed",
                error=str(e),
                model=self.model,
                error_type=type(e).__name__,
            )
            raise ExternalServiceError(
                f"Model call failed: {e}", service="dashscope", model=self.model
            ) from e

        text = result.content if hasattr(result, "content") else str(result)
        if isinstance(text, list):
            # LangChain content can be a list of parts
            text = "".join(
                part if isinstance(part, str) else str(part.get("text", ""))
                for part in text
            )
        text = (text or "").strip()

        self._record_usage(getattr(result, "response_metadata", {}) or {})

        if not text:
            raise ExternalServiceError(
                "Model returned an empty reply", service="dashscope", model=self.model
            )

        logger.debug("LLM reply received", model=self.model, reply_length=len(text))
        return text

    def _record_usage(self, response_metadata: dict) -> None:
        token_usage = response_metadata.get("token_usage") or {}
        if not token_usage:
            return
        self.last_token_usage = TokenUsage(
            input_tokens=token_usage.get("input_tokens", 0),
            output_tokens=token_usage.get("output_tokens", 0),
            total_tokens=token_usage.get("total_tokens", 0),
        )
        logger.info(
            "LLM call completed",
            model=self.model,
            input_tokens=self.last_token_usage.input_tokens,
            output_tokens=self.last_token_usage.output_tokens,
            total_tokens=self.last_token_usage.total_tokens,
        )


class OfflineGenerator:
    """
    Generator used when no model is configured.

    Every call fails, so the agent runs entirely on its deterministic
    fallbacks (keyword classification, synthetic data, fixed answers).
    """

    def __init__(self, reason: str = "No LLM API key configured"):
        self.reason = reason

    async def generate(self, prompt: str) -> str:
        raise ExternalServiceError(self.reason, service="dashscope")
