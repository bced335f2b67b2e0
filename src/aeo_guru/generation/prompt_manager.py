"""
Prompt Manager for cluster annotation and export generation

Loads prompt templates from the package prompts/ directory and fills
their {placeholder} markers.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CLUSTER_ANNOTATION = "cluster_annotation.txt"
CANONICAL_QUESTIONS = "canonical_questions.txt"
FAQ_JSONLD = "faq_jsonld.txt"
INTENT_JSONLD = "intent_jsonld.txt"
ROBOTS_TXT = "robots_txt.txt"
SEMANTIC_CORE_SUMMARY = "semantic_core_summary.txt"


class PromptManager:
    """
    Manages prompt templates.

    Handles:
    - Loading prompt templates from files
    - Filling placeholders
    - Caching loaded templates
    """

    def __init__(self, prompt_dir: Optional[str] = None):
        """
        Args:
            prompt_dir: Directory containing prompt files (defaults to package prompts/)
        """
        if prompt_dir is None:
            self.prompt_dir = Path(__file__).parent / "prompts"
        else:
            self.prompt_dir = Path(prompt_dir)

        self._prompt_cache: Dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load prompt template from file.

        Raises:
            FileNotFoundError: If prompt file doesn't exist
        """
        if prompt_name in self._prompt_cache:
            return self._prompt_cache[prompt_name]

        prompt_path = self.prompt_dir / prompt_name

        if not prompt_path.exists():
            raise FileNotFoundError(
                f"Prompt file not found: {prompt_path}. "
                f"Available prompts: {sorted(p.name for p in self.prompt_dir.glob('*.txt'))}"
            )

        with open(prompt_path, "r", encoding="utf-8") as f:
            prompt_template = f.read()

        self._prompt_cache[prompt_name] = prompt_template
        return prompt_template

    def format_prompt(self, prompt_name: str, **values: Any) -> str:
        """
        Fill a template's {name} placeholders.

        Uses replace() because templates contain literal JSON braces.
        None values become empty strings.
        """
        formatted = self.load_prompt(prompt_name)
        for key, value in values.items():
            formatted = formatted.replace("{" + key + "}", "" if value is None else str(value))
        return formatted

    def get_prompt_stats(self, prompt: str) -> Dict[str, Any]:
        """Character, word and rough token counts for a formatted prompt."""
        char_count = len(prompt)
        return {
            "char_count": char_count,
            "word_count": len(prompt.split()),
            "estimated_tokens": char_count // 4,  # Rough estimate
        }
