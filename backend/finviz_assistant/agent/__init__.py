"""
Visualization agent: intent routing, clarification and data synthesis.

The turn pipeline classifies each user utterance, resolves missing format or
data subject through clarifying questions, and produces table/chart/list
data or a concise answer. All model calls go through a TextGenerator, so the
whole pipeline runs against fakes in tests.
"""

from ..core.config import Settings
from .clarification import ClarificationResolver
from .data_synthesizer import DataSynthesizer
from .general_responder import GeneralResponder
from .intent_classifier import IntentClassifier
from .llm_client import DashScopeClient, OfflineGenerator, TextGenerator
from .pipeline import TurnPipeline
from .response_assembler import ResponseAssembler


def build_pipeline(llm: TextGenerator, settings: Settings) -> TurnPipeline:
    """Wire a TurnPipeline around one text generator."""
    return TurnPipeline(
        classifier=IntentClassifier(
            llm, none_case_sensitive=settings.classifier_none_case_sensitive
        ),
        resolver=ClarificationResolver(),
        synthesizer=DataSynthesizer(llm, settings),
        responder=GeneralResponder(llm),
        assembler=ResponseAssembler(),
    )


__all__ = [
    "ClarificationResolver",
    "DashScopeClient",
    "DataSynthesizer",
    "GeneralResponder",
    "IntentClassifier",
    "OfflineGenerator",
    "ResponseAssembler",
    "TextGenerator",
    "TurnPipeline",
    "build_pipeline",
]
