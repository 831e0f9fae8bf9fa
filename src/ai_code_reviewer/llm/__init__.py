"""
LLM Review Generation

Prompt construction, provider backends and response parsing.
"""

from .prompts import PromptBuilder
from .backends import (
    ModelBackend,
    ChatCompletionBackend,
    MessageBackend,
    BackendRegistry,
    ModelError,
    SamplingParams,
    default_registry,
)
from .client import ModelClient
from .response import ResponseParser, ResponseParseResult, ResponseFormatError

__all__ = [
    "PromptBuilder",
    "ModelBackend",
    "ChatCompletionBackend",
    "MessageBackend",
    "BackendRegistry",
    "ModelError",
    "SamplingParams",
    "default_registry",
    "ModelClient",
    "ResponseParser",
    "ResponseParseResult",
    "ResponseFormatError",
]
