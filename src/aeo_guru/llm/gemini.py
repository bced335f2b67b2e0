"""
Gemini LLM Client Implementation

Uses the Google Gen AI SDK, either with an API key or through Vertex AI.
"""

import logging
import time
from typing import Any, Optional

from google import genai
from google.genai import types

from .base import BaseLLMClient, GenerationConfig, LLMProvider, LLMResponse
from .config import get_api_key, get_gcp_config

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0
MAX_BACKOFF = 30.0

RETRIABLE_MARKERS = ('rate', 'quota', '429', 'internal', '500', '503', 'unavailable')


def build_genai_client(
    project_id: Optional[str] = None,
    region: Optional[str] = None,
    api_key: Optional[str] = None
) -> Any:
    """
    Create a genai.Client.

    An API key (argument or GOOGLE_GENAI_API_KEY / GOOGLE_API_KEY /
    GEMINI_API_KEY) selects the Gemini Developer API; otherwise Vertex AI is
    used with the given or environment GCP project and region.
    """
    api_key = api_key or get_api_key()
    if api_key:
        logger.info("Initializing Gen AI client with API key")
        return genai.Client(api_key=api_key)

    default_project, default_region = get_gcp_config()
    project_id = project_id or default_project
    region = region or default_region
    if not project_id:
        raise ValueError(
            "Missing Google credentials. Set GOOGLE_GENAI_API_KEY (or GOOGLE_API_KEY, "
            "GEMINI_API_KEY) or GCP_PROJECT for Vertex AI."
        )

    logger.info(f"Initializing Gen AI client for Vertex AI: project={project_id}, region={region}")
    return genai.Client(vertexai=True, project=project_id, location=region)


class GeminiClient(BaseLLMClient):
    """Gemini client using the Google Gen AI SDK."""

    def __init__(
        self,
        model_id: str = "gemini-2.5-flash",
        project_id: Optional[str] = None,
        region: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[Any] = None
    ):
        super().__init__(model_id, project_id, region)
        self._api_key = api_key
        self._client = client
        if client is not None:
            self._initialized = True

    @property
    def provider(self) -> LLMProvider:
        return LLMProvider.GEMINI

    def _initialize(self) -> None:
        self._client = build_genai_client(self.project_id, self.region, self._api_key)
        logger.info(f"Gemini client initialized: {self.model_id}")

    def _build_config(self, config: GenerationConfig, system_prompt: Optional[str]) -> Any:
        gen_config = types.GenerateContentConfig(
            temperature=config.temperature,
            max_output_tokens=config.max_output_tokens,
            top_p=config.top_p,
            top_k=config.top_k,
            **config.extra
        )
        if config.json_output:
            gen_config.response_mime_type = "application/json"
        if system_prompt:
            gen_config.system_instruction = system_prompt
        return gen_config

    def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        system_prompt: Optional[str] = None
    ) -> LLMResponse:
        """
        Generate text using Gemini.

        Retries rate-limit and server errors with exponential backoff.
        """
        self._ensure_initialized()

        config = config or GenerationConfig()
        gen_config = self._build_config(config, system_prompt)

        backoff = INITIAL_BACKOFF

        for attempt in range(MAX_RETRIES):
            try:
                response = self._client.models.generate_content(
                    model=self.model_id,
                    contents=prompt,
                    config=gen_config
                )

                text = response.text
                finish_reason = None
                if response.candidates:
                    finish_reason = getattr(response.candidates[0], 'finish_reason', None)

                if not text or not text.strip():
                    raise ValueError(f"Empty response from Gemini. Finish reason: {finish_reason}")

                usage = getattr(response, 'usage_metadata', None)
                return LLMResponse(
                    text=text,
                    model=self.model_id,
                    provider=self.provider,
                    input_tokens=getattr(usage, 'prompt_token_count', None) if usage else None,
                    output_tokens=getattr(usage, 'candidates_token_count', None) if usage else None,
                    finish_reason=str(finish_reason) if finish_reason else None,
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
                    logger.error(f"Gemini generation failed after {attempt + 1} attempts: {e}")
                    raise
