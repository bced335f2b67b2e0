"""
Claude LLM Client Implementation

Uses the Anthropic SDK with the Vertex AI backend.
"""

import logging
import os
import time
from typing import Any, Optional

from .base import BaseLLMClient, GenerationConfig, LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0
MAX_BACKOFF = 30.0

RETRIABLE_MARKERS = ('rate', 'overloaded', '429', '500', '503', 'timeout')


class ClaudeClient(BaseLLMClient):
    """
    Claude client using AnthropicVertex.

    Requires: pip install 'anthropic[vertex]'
    """

    def __init__(
        self,
        model_id: str = "claude-haiku-4-5@20251001",
        project_id: Optional[str] = None,
        region: Optional[str] = None,
        client: Optional[Any] = None
    ):
        project_id = project_id or os.environ.get('GCP_PROJECT')
        region = region or os.environ.get('CLAUDE_REGION', 'europe-west1')
        super().__init__(model_id, project_id, region)
        self._client = client
        if client is not None:
            self._initialized = True

    @property
    def provider(self) -> LLMProvider:
        return LLMProvider.CLAUDE

    def _initialize(self) -> None:
        from anthropic import AnthropicVertex

        if not self.project_id:
            raise ValueError("GCP_PROJECT is required for Claude on Vertex AI")

        logger.info(
            f"Initializing Claude: model={self.model_id}, "
            f"project={self.project_id}, region={self.region}"
        )
        self._client = AnthropicVertex(project_id=self.project_id, region=self.region)

    def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        system_prompt: Optional[str] = None
    ) -> LLMResponse:
        """Generate text using Claude."""
        self._ensure_initialized()

        config = config or GenerationConfig()

        kwargs = {
            "model": self.model_id,
            "max_tokens": config.max_output_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": config.temperature,
        }
        if system_prompt:
            kwargs["system"] = system_prompt
        if config.top_k:
            kwargs["top_k"] = config.top_k
        kwargs.update(config.extra)

        backoff = INITIAL_BACKOFF

        for attempt in range(MAX_RETRIES):
            try:
                response = self._client.messages.create(**kwargs)

                text = ''.join(
                    block.text for block in (response.content or []) if hasattr(block, 'text')
                )
                if not text.strip():
                    raise ValueError("Empty text from Claude API")

                return LLMResponse(
                    text=text,
                    model=self.model_id,
                    provider=self.provider,
                    input_tokens=response.usage.input_tokens if response.usage else None,
                    output_tokens=response.usage.output_tokens if response.usage else None,
                    finish_reason=response.stop_reason,
                    raw_response=response
                )

            except Exception as e:
                error_msg = str(e).lower()
                is_retriable = any(marker in error_msg for marker in RETRIABLE_MARKERS)

                if is_retriable and attempt < MAX_RETRIES - 1:
                    logger.warning(
                        f"Retriable error (attempt {attempt + 1}/{MAX_RETRIES}): {e}. "
                        f"Retrying after {backoff}s"
                    )
                    time.sleep(backoff)
                    backoff = min(backoff * 2, MAX_BACKOFF)
                else:
                    logger.error(f"Claude generation failed after {attempt + 1} attempts: {e}")
                    raise
