"""
Data Model

Documents, chunks and ranking results passed between the RAG components.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Document:
    """A unit of ingested knowledge, e.g. an article or a documentation page."""

    content: str
    source: str
    type: str = "article"  # "article", "documentation", "diagram", ...


@dataclass(frozen=True)
class Chunk:
    """
    Bounded slice of a document's text.

    `chunk_id` stays None until the vector index commits the chunk and
    assigns it a handle.
    """

    content: str
    source: str
    type: str
    chunk_index: int
    chunk_id: Optional[int] = None


@dataclass(frozen=True)
class RankedChunk:
    """A chunk with its similarity score and 0-based rank."""

    chunk: Chunk
    score: float
    rank: int
