"""LLM-backed annotation and document generation."""

from .annotator import ClusterAnnotator, build_representative_text, cluster_members, primary_url
from .answer_graph import AnswerGraphBuilder
from .generators import (
    generate_faq_jsonld,
    generate_intent_jsonld,
    generate_robots_txt,
    generate_semantic_core_summary,
)
from .prompt_manager import PromptManager
from .schema import (
    INTENTS,
    CanonicalQuestion,
    ClusterAnnotation,
    SemanticCoreSummary,
    validate_annotation_response,
)

__all__ = [
    "AnswerGraphBuilder",
    "CanonicalQuestion",
    "ClusterAnnotation",
    "ClusterAnnotator",
    "INTENTS",
    "PromptManager",
    "SemanticCoreSummary",
    "build_representative_text",
    "cluster_members",
    "generate_faq_jsonld",
    "generate_intent_jsonld",
    "generate_robots_txt",
    "generate_semantic_core_summary",
    "primary_url",
    "validate_annotation_response",
]
