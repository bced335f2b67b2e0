"""Chunking and embedding of page content."""

from .chunker import ChunkConfig, TextChunk, chunk_text
from .embeddings import EmbeddingClient, EmbeddingError

__all__ = ['ChunkConfig', 'EmbeddingClient', 'EmbeddingError', 'TextChunk', 'chunk_text']
