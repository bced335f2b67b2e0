"""
LLM Configuration and Model Registry

Defines available models, aliases and the task presets (reasoning, fast,
structured) used by the annotation layer.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .base import LLMProvider

logger = logging.getLogger(__name__)


@dataclass
class ModelInfo:
    """Information about a specific model."""
    model_id: str
    provider: LLMProvider
    description: str
    max_context: int
    max_output: int
    regions: List[str]  # Supported Vertex regions (empty = global only)


MODEL_REGISTRY: Dict[str, ModelInfo] = {
    "gemini-2.5-pro": ModelInfo(
        model_id="gemini-2.5-pro",
        provider=LLMProvider.GEMINI,
        description="Gemini 2.5 Pro - cluster annotation and summaries",
        max_context=1_000_000,
        max_output=65536,
        regions=["europe-west4", "us-central1"]
    ),
    "gemini-2.5-flash": ModelInfo(
        model_id="gemini-2.5-flash",
        provider=LLMProvider.GEMINI,
        description="Gemini 2.5 Flash - questions, JSON-LD, robots.txt",
        max_context=1_000_000,
        max_output=65536,
        regions=["europe-west4", "us-central1", "asia-northeast1"]
    ),
    "claude-haiku-4-5": ModelInfo(
        model_id="claude-haiku-4-5@20251001",
        provider=LLMProvider.CLAUDE,
        description="Claude Haiku 4.5 via Vertex AI",
        max_context=200_000,
        max_output=8192,
        regions=["us-east5", "europe-west1"]
    ),
    "claude-sonnet-4-5": ModelInfo(
        model_id="claude-sonnet-4-5@20250929",
        provider=LLMProvider.CLAUDE,
        description="Claude Sonnet 4.5 via Vertex AI",
        max_context=200_000,
        max_output=8192,
        regions=["us-east5", "europe-west1"]
    ),
}

MODEL_ALIASES: Dict[str, str] = {
    "gemini": "gemini-2.5-flash",
    "gemini-flash": "gemini-2.5-flash",
    "gemini-pro": "gemini-2.5-pro",
    "claude": "claude-haiku-4-5",
    "haiku": "claude-haiku-4-5",
    "sonnet": "claude-sonnet-4-5",
}

# Preset -> (environment override, default model)
MODEL_PRESETS: Dict[str, Tuple[str, str]] = {
    "reasoning": ("GOOGLE_GENAI_REASONING_MODEL", "gemini-2.5-pro"),
    "fast": ("GOOGLE_GENAI_FAST_MODEL", "gemini-2.5-flash"),
    "structured": ("GOOGLE_GENAI_STRUCTURED_MODEL", "gemini-2.5-flash"),
}


def resolve_model_name(name: str) -> str:
    """Resolve an alias (or a "models/" prefixed name) to a registry name."""
    name = name.strip()
    if name.startswith("models/"):
        name = name[len("models/"):]
    return MODEL_ALIASES.get(name.lower(), name)


def get_model_info(name: str) -> Optional[ModelInfo]:
    """Get model info by name or alias, None if unknown."""
    return MODEL_REGISTRY.get(resolve_model_name(name))


def get_preset_model(preset: str) -> str:
    """
    Get the model for a task preset.

    Raises:
        ValueError: If the preset is unknown
    """
    if preset not in MODEL_PRESETS:
        raise ValueError(f"Unknown preset: {preset}. Available: {', '.join(MODEL_PRESETS)}")
    env_name, default = MODEL_PRESETS[preset]
    return resolve_model_name(os.environ.get(env_name) or default)


def get_default_model() -> str:
    """
    Get default model from environment or fallback.

    Environment variables:
        LLM_MODEL: Primary model selection
        LLM_PROVIDER: Provider preference (gemini/claude)
    """
    model = os.environ.get('LLM_MODEL')
    if model:
        resolved = resolve_model_name(model)
        if resolved in MODEL_REGISTRY:
            logger.info(f"Using model from LLM_MODEL: {resolved}")
            return resolved
        logger.warning(f"Unknown model '{model}', falling back to default")

    if os.environ.get('LLM_PROVIDER', '').lower() == 'claude':
        logger.info("Using Claude (from LLM_PROVIDER)")
        return "claude-haiku-4-5"

    return get_preset_model("reasoning")


def get_api_key() -> Optional[str]:
    """Gemini API key, if one is configured (otherwise Vertex AI is used)."""
    for name in ('GOOGLE_GENAI_API_KEY', 'GOOGLE_GENERATIVE_AI_API_KEY', 'GOOGLE_API_KEY', 'GEMINI_API_KEY'):
        value = os.environ.get(name)
        if value:
            return value
    return None


def get_gcp_config() -> Tuple[Optional[str], str]:
    """Get GCP project and region from environment."""
    return os.environ.get('GCP_PROJECT'), os.environ.get('GCP_REGION', 'europe-west4')
