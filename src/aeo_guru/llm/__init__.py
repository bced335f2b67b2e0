"""
LLM Provider Abstraction Layer

Unified interface for Gemini and Claude.

Usage:
    from aeo_guru.llm import get_client
    client = get_client(preset="structured")
    data = client.generate_json("Return JSON with keys: label, intent")

Environment Variables:
    LLM_MODEL: Default model (e.g., "gemini-2.5-pro", "claude-haiku")
    LLM_PROVIDER: Provider preference ("gemini" or "claude")
    GOOGLE_GENAI_API_KEY / GOOGLE_API_KEY / GEMINI_API_KEY: Gemini API key
    GOOGLE_GENAI_{REASONING,FAST,STRUCTURED}_MODEL: Preset overrides
    GCP_PROJECT, GCP_REGION: Vertex AI settings when no API key is set
    CLAUDE_REGION: Vertex region for Claude (default: europe-west1)
"""

import logging
from typing import Optional

from .base import BaseLLMClient, GenerationConfig, LLMProvider, LLMResponse
from .config import (
    MODEL_ALIASES,
    MODEL_PRESETS,
    MODEL_REGISTRY,
    ModelInfo,
    get_default_model,
    get_model_info,
    get_preset_model,
    resolve_model_name,
)

logger = logging.getLogger(__name__)


def get_client(
    model: Optional[str] = None,
    preset: Optional[str] = None,
    project_id: Optional[str] = None,
    region: Optional[str] = None,
) -> BaseLLMClient:
    """
    Build an LLM client.

    Args:
        model: Model name or alias; wins over preset
        preset: "reasoning", "fast" or "structured"
        project_id: GCP project ID (Vertex AI)
        region: GCP region (Vertex AI)

    Returns:
        Configured, not yet connected client

    Raises:
        ValueError: If the model or preset is unknown
    """
    if model:
        model_name = resolve_model_name(model)
    elif preset:
        model_name = get_preset_model(preset)
    else:
        model_name = get_default_model()

    model_info = get_model_info(model_name)
    if not model_info:
        available = ", ".join(list(MODEL_REGISTRY.keys()) + list(MODEL_ALIASES.keys()))
        raise ValueError(f"Unknown model: {model_name}. Available: {available}")

    if model_info.provider == LLMProvider.GEMINI:
        from .gemini import GeminiClient
        client: BaseLLMClient = GeminiClient(
            model_id=model_info.model_id, project_id=project_id, region=region
        )
    elif model_info.provider == LLMProvider.CLAUDE:
        from .claude import ClaudeClient
        client = ClaudeClient(model_id=model_info.model_id, project_id=project_id, region=region)
    else:
        raise ValueError(f"Unsupported provider: {model_info.provider}")

    logger.info(f"Created LLM client: {client}")
    return client


__all__ = [
    "get_client",
    "BaseLLMClient",
    "GenerationConfig",
    "LLMProvider",
    "LLMResponse",
    "ModelInfo",
    "MODEL_PRESETS",
    "get_default_model",
    "get_model_info",
    "get_preset_model",
]
