"""Intent classification backed by LLM providers."""

from .base import LLMProvider, LLMToolResponse, ToolCall
from .classifier import IntentClassifier, LLMIntentClassifier, build_classifier

__all__ = [
    "IntentClassifier",
    "LLMIntentClassifier",
    "LLMProvider",
    "LLMToolResponse",
    "ToolCall",
    "build_classifier",
]
