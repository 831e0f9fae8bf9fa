"""
Model Backends

Provider-specific adapters behind a common ``ModelBackend`` interface,
and a registry that selects a backend from the model identifier.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple

import anthropic
import openai


logger = logging.getLogger(__name__)


class ModelError(Exception):
    """Model provider call failed."""
    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message)
        self.model_id = model_id


@dataclass(frozen=True)
class SamplingParams:
    """Sampling parameters sent with every review request."""
    temperature: float = 0.2
    max_tokens: int = 700
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


class ModelBackend(ABC):
    """Sends a single-prompt completion request to one provider."""

    def __init__(self, model_id: str, api_key: str, base_url: Optional[str] = None, timeout: float = 120):
        self.model_id = model_id
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    @property
    def supports_json_mode(self) -> bool:
        return False

    @abstractmethod
    async def complete(self, prompt: str, params: SamplingParams) -> Optional[str]:
        """
        Return the raw completion text, or None when the provider returned
        no content.

        Raises:
            ModelError: When the provider call fails
        """


class ChatCompletionBackend(ModelBackend):
    """OpenAI-compatible chat completions protocol."""

    json_mode_patterns = (
        re.compile(r'^gpt-4'),
        re.compile(r'^gpt-3\.5-turbo'),
        re.compile(r'^o\d'),
    )

    def __init__(self, model_id: str, api_key: str, base_url: Optional[str] = None, timeout: float = 120):
        super().__init__(model_id, api_key, base_url, timeout)
        self.client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    @property
    def supports_json_mode(self) -> bool:
        return any(pattern.match(self.model_id) for pattern in self.json_mode_patterns)

    async def complete(self, prompt: str, params: SamplingParams) -> Optional[str]:
        request = {
            'model': self.model_id,
            'messages': [{'role': 'user', 'content': prompt}],
            'temperature': params.temperature,
            'max_tokens': params.max_tokens,
            'top_p': params.top_p,
            'frequency_penalty': params.frequency_penalty,
            'presence_penalty': params.presence_penalty,
        }
        if self.supports_json_mode:
            request['response_format'] = {'type': 'json_object'}

        try:
            response = await self.client.chat.completions.create(**request)
        except openai.OpenAIError as e:
            raise ModelError(f"Chat completion failed: {e}", model_id=self.model_id) from e

        if not response.choices:
            return None
        return response.choices[0].message.content


class MessageBackend(ModelBackend):
    """Anthropic messages protocol. No JSON mode; the raw text path is used."""

    def __init__(self, model_id: str, api_key: str, base_url: Optional[str] = None, timeout: float = 120):
        super().__init__(model_id, api_key, base_url, timeout)
        self.client = anthropic.AsyncAnthropic(api_key=api_key, base_url=base_url, timeout=timeout)

    async def complete(self, prompt: str, params: SamplingParams) -> Optional[str]:
        request = {
            'model': self.model_id,
            'max_tokens': params.max_tokens,
            'temperature': params.temperature,
            'messages': [{'role': 'user', 'content': prompt}],
        }
        # Penalties are not part of this protocol; top_p only when it narrows sampling
        if params.top_p < 1.0:
            request['top_p'] = params.top_p

        try:
            response = await self.client.messages.create(**request)
        except anthropic.AnthropicError as e:
            raise ModelError(f"Message request failed: {e}", model_id=self.model_id) from e

        texts = [block.text for block in response.content if getattr(block, 'type', None) == 'text']
        return "".join(texts) if texts else None


BackendFactory = Callable[..., ModelBackend]


class BackendRegistry:
    """
    Maps model-id patterns to backend factories.

    Patterns are tried in registration order; the first match wins.
    """

    def __init__(self):
        self._entries: List[Tuple[Pattern, BackendFactory]] = []

    def register(self, pattern: str, factory: BackendFactory) -> None:
        self._entries.append((re.compile(pattern), factory))

    def resolve(self, model_id: str) -> BackendFactory:
        for pattern, factory in self._entries:
            if pattern.match(model_id):
                return factory
        raise ModelError(f"No model backend registered for '{model_id}'", model_id=model_id)

    def create(self, model_id: str, api_key: str, base_url: Optional[str] = None, timeout: float = 120) -> ModelBackend:
        factory = self.resolve(model_id)
        logger.info(f"Using {getattr(factory, '__name__', 'custom')} for model {model_id}")
        return factory(model_id, api_key, base_url=base_url, timeout=timeout)


def default_registry() -> BackendRegistry:
    registry = BackendRegistry()
    registry.register(r'^(gpt-|o\d|chatgpt-)', ChatCompletionBackend)
    registry.register(r'^claude-', MessageBackend)
    return registry
