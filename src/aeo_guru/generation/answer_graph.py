"""
Answer graph: canonical user questions per cluster, stored as query points.

Each question is embedded and upserted with type="query", source="serp"
and the cluster's annotation so exports can pair clusters with questions.
"""

import logging
from typing import List, Optional
from urllib.parse import quote

from ..clustering.models import ProjectPoint
from ..embed.embeddings import EmbeddingClient
from ..llm import BaseLLMClient, GenerationConfig
from ..store.vector_store import VectorStore, point_id_for
from .prompt_manager import CANONICAL_QUESTIONS, PromptManager
from .schema import CanonicalQuestion, ClusterAnnotation, validate_questions_response

logger = logging.getLogger(__name__)

FALLBACK_URL_BASE = "https://aeo-guru.local/project/"


class AnswerGraphBuilder:
    """Generates, embeds and stores canonical questions for clusters."""

    def __init__(
        self,
        client: BaseLLMClient,
        embedder: EmbeddingClient,
        store: VectorStore,
        prompt_manager: Optional[PromptManager] = None
    ):
        self.client = client
        self.embedder = embedder
        self.store = store
        self.prompt_manager = prompt_manager or PromptManager()
        self.config = GenerationConfig(temperature=0.5, max_output_tokens=1024)

    def generate_questions(self, annotation: ClusterAnnotation, lang: str) -> List[CanonicalQuestion]:
        """
        Ask the LLM for 3-8 canonical questions.

        Raises:
            ValueError: If the response has fewer than 3 usable questions
        """
        prompt = self.prompt_manager.format_prompt(
            CANONICAL_QUESTIONS,
            lang=lang,
            label=annotation.label,
            intent=annotation.intent,
            primary_keyword=annotation.primary_keyword,
            summary=annotation.summary,
        )
        return validate_questions_response(self.client.generate_json(prompt, self.config))

    def build(
        self,
        project_id: str,
        cluster_id: str,
        annotation: ClusterAnnotation,
        lang: str = "en",
        primary_url: Optional[str] = None,
        dry_run: bool = False
    ) -> List[CanonicalQuestion]:
        """
        Generate questions for a cluster and store them as query points.

        Args:
            project_id: Owning project
            cluster_id: Cluster the questions belong to
            annotation: The cluster's annotation
            lang: Language of the questions
            primary_url: URL the questions point to (a project placeholder otherwise)
            dry_run: Generate only, do not embed or store

        Returns:
            The generated questions
        """
        questions = self.generate_questions(annotation, lang)
        if dry_run:
            return questions

        vectors = self.embedder.embed_texts([q.question for q in questions])
        self.store.ensure_collection(len(vectors[0]))

        url = primary_url or f"{FALLBACK_URL_BASE}{quote(project_id, safe='')}"
        points = []
        for idx, (question, vector) in enumerate(zip(questions, vectors)):
            key = f"{project_id}:{cluster_id}:query-{idx}"
            points.append(ProjectPoint(
                id=point_id_for(key),
                vector=vector,
                payload={
                    "projectId": project_id,
                    "type": "query",
                    "source": "serp",
                    "pointKey": key,
                    "url": url,
                    "title": question.question,
                    "h1": question.question,
                    "lang": lang,
                    "content": question.question,
                    "chunkIndex": idx,
                    "clusterId": cluster_id,
                    "clusterLabel": annotation.label,
                    "intent": question.intent or annotation.intent,
                    "primaryKeyword": annotation.primary_keyword,
                    "secondaryKeywords": list(annotation.secondary_keywords),
                    "score_opportunity": None,
                },
            ))

        self.store.upsert_points(points)
        logger.info(f"Stored {len(points)} canonical questions for {cluster_id}")
        return questions
