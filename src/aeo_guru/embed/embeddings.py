"""
Text embedding generation using gemini-embedding-001 via the Google Gen AI SDK.

Document sections and generated questions are embedded with the same model
and dimensionality so they share one vector space.
"""

import logging
import time
from typing import Any, List, Optional, Sequence

from google.genai import errors as genai_errors
from google.genai import types

from ..llm.gemini import build_genai_client

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-embedding-001"
DEFAULT_DIMENSIONS = 768
DEFAULT_BATCH_SIZE = 16

# Retry configuration
MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0  # seconds
MAX_BACKOFF = 32.0  # seconds


class EmbeddingError(Exception):
    """Raised when embeddings cannot be generated."""


def _is_retriable(error: genai_errors.APIError) -> bool:
    code = getattr(error, 'code', None) or 0
    return code == 429 or code >= 500


class EmbeddingClient:
    """
    Embedding client with an explicit initialization step.

    Args:
        model_name: Embedding model ID
        dimensions: Output dimensionality
        project_id: GCP project ID (Vertex AI mode)
        region: GCP region (Vertex AI mode)
        batch_size: Texts per API call
        client: Pre-built genai.Client (skips initialize())
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        dimensions: int = DEFAULT_DIMENSIONS,
        project_id: Optional[str] = None,
        region: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        client: Optional[Any] = None
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.model_name = model_name
        self.dimensions = dimensions
        self.project_id = project_id
        self.region = region
        self.batch_size = batch_size
        self._client = client

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def initialize(self) -> "EmbeddingClient":
        """Create the underlying Gen AI client."""
        if self._client is None:
            logger.info(
                f"Initializing embedding client: model={self.model_name}, "
                f"dimensions={self.dimensions}"
            )
            self._client = build_genai_client(self.project_id, self.region)
        return self

    def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed texts in batches, preserving input order.

        Args:
            texts: Texts to embed

        Returns:
            One vector per input text

        Raises:
            EmbeddingError: If the client is not initialized or a batch
                fails after retries
        """
        if not texts:
            return []
        if self._client is None:
            raise EmbeddingError("EmbeddingClient.initialize() must be called first")

        vectors: List[List[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = list(texts[start:start + self.batch_size])
            vectors.extend(self._embed_batch(batch))

        logger.info(f"Generated {len(vectors)} embeddings ({self.dimensions} dimensions)")
        return vectors

    def embed_text(self, text: str) -> List[float]:
        """Embed a single text."""
        return self.embed_texts([text])[0]

    def _embed_batch(self, batch: List[str]) -> List[List[float]]:
        config = types.EmbedContentConfig(output_dimensionality=self.dimensions)
        backoff = INITIAL_BACKOFF

        for attempt in range(MAX_RETRIES):
            try:
                response = self._client.models.embed_content(
                    model=self.model_name,
                    contents=batch,
                    config=config
                )
                embeddings = response.embeddings or []
                if len(embeddings) != len(batch):
                    raise EmbeddingError(
                        f"Expected {len(batch)} embeddings, got {len(embeddings)}"
                    )
                return [list(embedding.values) for embedding in embeddings]

            except genai_errors.APIError as e:
                if _is_retriable(e) and attempt < MAX_RETRIES - 1:
                    logger.warning(
                        f"Retriable embedding error (attempt {attempt + 1}/{MAX_RETRIES}): "
                        f"{e}. Retrying after {backoff}s"
                    )
                    time.sleep(backoff)
                    backoff = min(backoff * 2, MAX_BACKOFF)
                    continue
                logger.error(f"Embedding failed after {attempt + 1} attempts: {e}")
                raise EmbeddingError(f"Embedding generation failed: {e}") from e

        raise EmbeddingError("Failed to generate embeddings after maximum retries")
