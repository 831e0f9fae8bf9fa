"""
Model Client

Provider-agnostic entry point for review completions.
"""

import logging
from typing import Optional

from ..config import ModelConfig
from .backends import BackendRegistry, ModelBackend, SamplingParams, default_registry


logger = logging.getLogger(__name__)


class ModelClient:
    """
    Sends review prompts to the backend selected for the configured model.

    Safe to share across a run; the underlying SDK clients are created
    once at construction.
    """

    def __init__(
        self,
        config: ModelConfig,
        registry: Optional[BackendRegistry] = None,
        backend: Optional[ModelBackend] = None
    ):
        """
        Initialize model client.

        Args:
            config: Model configuration (id, key, sampling, timeout)
            registry: Backend registry, defaults to the built-in providers
            backend: Pre-built backend, bypasses registry lookup

        Raises:
            ModelError: When no backend matches the model id
        """
        self.config = config
        self.params = SamplingParams(
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            top_p=config.top_p,
        )
        if backend is None:
            registry = registry or default_registry()
            backend = registry.create(
                config.model_id,
                config.api_key,
                base_url=config.base_url,
                timeout=config.timeout_seconds,
            )
        self.backend = backend

    @property
    def model_id(self) -> str:
        return self.config.model_id

    async def invoke(self, prompt: str) -> str:
        """
        Get a completion for a prompt.

        Args:
            prompt: Review prompt text

        Returns:
            Trimmed completion text; empty string when the provider
            returned no content

        Raises:
            ModelError: When the provider call fails
        """
        content = await self.backend.complete(prompt, self.params)
        if not content:
            logger.warning(f"Empty completion from {self.model_id}")
            return ""
        return content.strip()
