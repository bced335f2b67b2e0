"""
LLM Provider Abstraction Layer - Base Classes

Unified interface for the providers used to annotate clusters and generate
export documents (Gemini, Claude).
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"
    CLAUDE = "claude"


@dataclass
class GenerationConfig:
    """
    Model-agnostic generation configuration.

    Maps to provider-specific configs internally.
    """
    temperature: float = 0.4
    max_output_tokens: int = 2048
    top_p: float = 0.95
    top_k: int = 40
    json_output: bool = False

    # Provider-specific overrides (optional)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Unified response from any LLM provider."""
    text: str
    model: str
    provider: LLMProvider

    # Usage stats (if available)
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None

    # Raw response for debugging
    raw_response: Optional[Any] = None

    finish_reason: Optional[str] = None


_FENCE_RE = re.compile(r'^```(?:json)?\s*\n?(.*?)\n?```$', re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block, with or without a json tag."""
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients.

    Clients are constructed with their settings and connect on first use
    (or explicitly via initialize()).
    """

    def __init__(self, model_id: str, project_id: Optional[str] = None, region: Optional[str] = None):
        self.model_id = model_id
        self.project_id = project_id
        self.region = region
        self._initialized = False

    @property
    @abstractmethod
    def provider(self) -> LLMProvider:
        """Return the provider type."""

    @abstractmethod
    def _initialize(self) -> None:
        """Create the underlying SDK client."""

    def initialize(self) -> "BaseLLMClient":
        """Connect the client now instead of on first use."""
        if not self._initialized:
            self._initialize()
            self._initialized = True
        return self

    def _ensure_initialized(self) -> None:
        self.initialize()

    @abstractmethod
    def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        system_prompt: Optional[str] = None
    ) -> LLMResponse:
        """
        Generate text from a prompt.

        Args:
            prompt: User prompt
            config: Generation configuration (uses defaults if None)
            system_prompt: Optional system prompt / system instruction

        Returns:
            LLMResponse with generated text and metadata
        """

    def generate_text(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        system_prompt: Optional[str] = None
    ) -> str:
        """Generate and return stripped text."""
        return self.generate(prompt, config, system_prompt).text.strip()

    def generate_json(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        system_prompt: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Generate and parse a JSON object response.

        Handles markdown code block stripping automatically.

        Raises:
            ValueError: If the response is not a valid JSON object
        """
        config = replace(config or GenerationConfig(), json_output=True)

        response = self.generate(prompt, config, system_prompt)
        text = strip_code_fences(response.text)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Invalid JSON response from {self.provider.value}: {text[:200]}"
            ) from e

        if not isinstance(data, dict):
            raise ValueError(
                f"Expected a JSON object from {self.provider.value}, got {type(data).__name__}"
            )
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model_id}, region={self.region})"
