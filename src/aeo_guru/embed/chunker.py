"""
Paragraph-bounded text chunking for page content.

Chunks never split inside a paragraph unless a single paragraph is longer
than the size budget.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

DEFAULT_MAX_CHARS = 1200
DEFAULT_MIN_CHARS = 320


@dataclass
class ChunkConfig:
    """Configuration for chunking behavior."""
    max_chars: int = DEFAULT_MAX_CHARS
    min_chars: int = DEFAULT_MIN_CHARS


@dataclass
class TextChunk:
    """A chunk of page text and the paragraph range it covers."""
    text: str
    start_paragraph: int
    end_paragraph: int


def split_paragraphs(text: str) -> List[str]:
    """Split on blank lines, collapse whitespace, drop empty paragraphs."""
    paragraphs = (re.sub(r'\s+', ' ', p).strip() for p in re.split(r'\n{2,}', text or ''))
    return [p for p in paragraphs if p]


def chunk_text(
    text: str,
    max_chars: Optional[int] = None,
    min_chars: Optional[int] = None,
    config: Optional[ChunkConfig] = None
) -> List[TextChunk]:
    """
    Split extracted page text into paragraph-bounded chunks.

    Paragraphs accumulate into a buffer. When adding the next paragraph would
    exceed max_chars and the buffer already holds at least min_chars, the
    buffer is emitted. Otherwise an oversized paragraph is cut: any pending
    buffer is emitted as is, the paragraph's first max_chars characters become
    a chunk of their own and the remainder starts the next buffer.

    Args:
        text: Page text with paragraphs separated by blank lines
        max_chars: Size budget per chunk (overrides config)
        min_chars: Minimum buffer size before a flush (overrides config)
        config: Chunking configuration

    Returns:
        List of TextChunk objects in document order
    """
    config = config or ChunkConfig()
    max_chars = max_chars if max_chars is not None else config.max_chars
    min_chars = min_chars if min_chars is not None else config.min_chars

    paragraphs = split_paragraphs(text)

    chunks: List[TextChunk] = []
    buffer = ""
    start_paragraph = 0

    for index, paragraph in enumerate(paragraphs):
        candidate = f"{buffer}\n\n{paragraph}" if buffer else paragraph

        if len(candidate) > max_chars and len(buffer) >= min_chars:
            chunks.append(TextChunk(buffer.strip(), start_paragraph, index - 1))
            buffer = paragraph
            start_paragraph = index
        elif len(candidate) > max_chars:
            if buffer.strip():
                chunks.append(TextChunk(buffer.strip(), start_paragraph, index - 1))
            forced = paragraph[:max_chars]
            chunks.append(TextChunk(forced.strip(), index, index))
            buffer = paragraph[max_chars:]
            start_paragraph = index
        else:
            buffer = candidate
            if len(buffer) == len(paragraph):
                start_paragraph = index

    if buffer.strip():
        chunks.append(TextChunk(buffer.strip(), start_paragraph, len(paragraphs) - 1))

    return chunks
