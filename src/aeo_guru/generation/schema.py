"""
Schema definitions for LLM-generated annotations

Defines the ClusterAnnotation, CanonicalQuestion and SemanticCoreSummary
dataclasses and the validators that turn raw LLM JSON into them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

INTENTS = ("informational", "transactional", "navigational", "local", "mixed")

MIN_QUESTIONS = 3
MAX_QUESTIONS = 8
MAX_LABEL_LENGTH = 120


def ensure_string_array(value: Any) -> List[str]:
    """Trimmed, non-empty strings of a list; anything else yields []."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def normalize_intent(value: Any, default: Optional[str] = None) -> Optional[str]:
    if isinstance(value, str) and value.strip().lower() in INTENTS:
        return value.strip().lower()
    return default


@dataclass
class ClusterAnnotation:
    """
    LLM description of one cluster.

    Attributes:
        label: Short topic name
        summary: What the cluster covers
        intent: One of INTENTS
        primary_keyword: Main search phrase
        secondary_keywords: Related phrases
        representative_queries: Questions users ask about the topic
        content_gaps: Subtopics the pages do not answer yet
        recommended_schemas: schema.org types fitting the pages
        opportunity_score: 0.0-1.0, higher is a bigger opportunity
    """

    label: str
    summary: str
    intent: str
    primary_keyword: str
    secondary_keywords: List[str] = field(default_factory=list)
    representative_queries: List[str] = field(default_factory=list)
    content_gaps: List[str] = field(default_factory=list)
    recommended_schemas: List[str] = field(default_factory=list)
    opportunity_score: float = 0.0

    def __post_init__(self):
        """Validate fields after initialization."""
        if not self.label.strip():
            raise ValueError("Cluster label must not be empty")
        if self.intent not in INTENTS:
            raise ValueError(f"Invalid intent: {self.intent}")
        if not 0.0 <= self.opportunity_score <= 1.0:
            raise ValueError(
                f"Opportunity score must be between 0.0 and 1.0, got {self.opportunity_score}"
            )

    def to_payload(self, cluster_id: str, primary_url: Optional[str]) -> Dict[str, Any]:
        """Payload keys written onto every point of the cluster."""
        return {
            "clusterId": cluster_id,
            "clusterLabel": self.label,
            "clusterSummary": self.summary,
            "clusterIntent": self.intent,
            "clusterPrimaryKeyword": self.primary_keyword,
            "clusterSecondaryKeywords": list(self.secondary_keywords),
            "clusterRepresentativeQueries": list(self.representative_queries),
            "clusterContentGaps": list(self.content_gaps),
            "clusterRecommendedSchemas": list(self.recommended_schemas),
            "clusterPrimaryUrl": primary_url,
            "intent": self.intent,
            "primaryKeyword": self.primary_keyword,
            "secondaryKeywords": list(self.secondary_keywords),
            "score_opportunity": self.opportunity_score,
        }


def validate_annotation_response(response: Dict[str, Any]) -> ClusterAnnotation:
    """
    Validate and convert an LLM response to a ClusterAnnotation.

    Unknown intents fall back to "mixed"; scores are clamped to [0, 1].

    Raises:
        ValueError: If required fields are missing or malformed
    """
    label = response.get("label")
    if not isinstance(label, str) or not label.strip():
        raise ValueError("Annotation is missing 'label'")

    primary_keyword = response.get("primaryKeyword")
    if not isinstance(primary_keyword, str) or not primary_keyword.strip():
        raise ValueError("Annotation is missing 'primaryKeyword'")

    raw_score = response.get("opportunityScore", 0.0)
    try:
        score = float(raw_score if raw_score is not None else 0.0)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid opportunityScore: {raw_score!r}") from e
    score = min(max(score, 0.0), 1.0)

    summary = response.get("summary")
    return ClusterAnnotation(
        label=label.strip()[:MAX_LABEL_LENGTH],
        summary=summary.strip() if isinstance(summary, str) else "",
        intent=normalize_intent(response.get("intent"), "mixed"),
        primary_keyword=primary_keyword.strip(),
        secondary_keywords=ensure_string_array(response.get("secondaryKeywords")),
        representative_queries=ensure_string_array(response.get("representativeQueries")),
        content_gaps=ensure_string_array(response.get("contentGaps")),
        recommended_schemas=ensure_string_array(response.get("recommendedSchemas")),
        opportunity_score=round(score, 3),
    )


@dataclass
class CanonicalQuestion:
    question: str
    intent: Optional[str] = None


def validate_questions_response(response: Dict[str, Any]) -> List[CanonicalQuestion]:
    """
    Validate the canonical-questions response.

    Blank and duplicate questions are dropped and at most MAX_QUESTIONS kept.

    Raises:
        ValueError: If fewer than MIN_QUESTIONS usable questions remain
    """
    raw = response.get("questions")
    if not isinstance(raw, list):
        raise ValueError("Response is missing a 'questions' list")

    questions: List[CanonicalQuestion] = []
    seen = set()
    for item in raw:
        if isinstance(item, str):
            text, intent = item.strip(), None
        elif isinstance(item, dict) and isinstance(item.get("question"), str):
            text, intent = item["question"].strip(), normalize_intent(item.get("intent"))
        else:
            continue
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        questions.append(CanonicalQuestion(question=text, intent=intent))

    if len(questions) < MIN_QUESTIONS:
        raise ValueError(f"Expected at least {MIN_QUESTIONS} questions, got {len(questions)}")
    return questions[:MAX_QUESTIONS]


def validate_faq_jsonld(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Raises:
        ValueError: If data is not a FAQPage with at least one answered question
    """
    if data.get("@context") != "https://schema.org" or data.get("@type") != "FAQPage":
        raise ValueError("FAQ JSON-LD must be a schema.org FAQPage")
    entities = data.get("mainEntity")
    if not isinstance(entities, list) or not entities:
        raise ValueError("FAQ JSON-LD has no questions")
    for entity in entities:
        answer = entity.get("acceptedAnswer") if isinstance(entity, dict) else None
        if (
            not isinstance(entity, dict)
            or entity.get("@type") != "Question"
            or not entity.get("name")
            or not isinstance(answer, dict)
            or not answer.get("text")
        ):
            raise ValueError(f"Malformed FAQ entry: {entity!r}")
    return data


def validate_page_jsonld(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Raises:
        ValueError: If required schema.org keys are missing
    """
    if data.get("@context") != "https://schema.org":
        raise ValueError("JSON-LD must use the https://schema.org context")
    schema_type = data.get("@type")
    if not (isinstance(schema_type, str) and schema_type.strip()) and not (
        isinstance(schema_type, list) and schema_type
    ):
        raise ValueError("JSON-LD is missing '@type'")
    for key in ("name", "url"):
        if not isinstance(data.get(key), str) or not data[key].strip():
            raise ValueError(f"JSON-LD is missing '{key}'")
    return data


@dataclass
class SemanticCoreSummary:
    executive_summary: str
    focus_topics: List[Dict[str, Any]] = field(default_factory=list)
    key_pages: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executiveSummary": self.executive_summary,
            "focusTopics": self.focus_topics,
            "keyPages": self.key_pages,
        }


def validate_semantic_core_summary(response: Dict[str, Any]) -> SemanticCoreSummary:
    """
    Raises:
        ValueError: If the executive summary is missing
    """
    summary = response.get("executiveSummary")
    if not isinstance(summary, str) or not summary.strip():
        raise ValueError("Semantic core summary is missing 'executiveSummary'")

    focus_topics = []
    for item in response.get("focusTopics") or []:
        if isinstance(item, dict) and isinstance(item.get("topic"), str) and item["topic"].strip():
            focus_topics.append({
                "topic": item["topic"].strip(),
                "rationale": str(item.get("rationale") or "").strip(),
                "primaryUrl": item.get("primaryUrl") or None,
            })

    key_pages = []
    for item in response.get("keyPages") or []:
        if isinstance(item, dict) and isinstance(item.get("url"), str) and item["url"].strip():
            key_pages.append({
                "url": item["url"].strip(),
                "title": str(item.get("title") or "").strip() or None,
                "reason": str(item.get("reason") or "").strip(),
            })

    return SemanticCoreSummary(
        executive_summary=summary.strip(),
        focus_topics=focus_topics,
        key_pages=key_pages,
    )
