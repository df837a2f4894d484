"""
Document Chunking Module

Provides word-bounded document chunking under a fixed size budget.
"""

from typing import List, Dict, Any

from ..errors import ValidationError
from ..models import Chunk, Document


class DocumentChunker:
    """
    Chunks documents into pieces of at most `chunk_size` words.

    Words are never split; whitespace between words is normalized to a
    single space.
    """

    def __init__(self, chunk_size: int = 1000):
        """
        Initialize the chunker.

        Args:
            chunk_size: Maximum number of words per chunk (must be > 0)
        """
        if chunk_size <= 0:
            raise ValidationError(f"chunk_size must be positive, got {chunk_size}")

        self.chunk_size = chunk_size

    def split(self, text: str) -> List[str]:
        """
        Split text into chunk strings.

        Args:
            text: Raw document text

        Returns:
            Ordered chunk strings; empty list for empty input
        """
        chunks = []
        buffer = []

        for word in text.split():
            buffer.append(word)
            if len(buffer) >= self.chunk_size:
                chunks.append(" ".join(buffer))
                buffer = []

        if buffer:
            chunks.append(" ".join(buffer))

        return chunks

    def chunk_document(self, doc: Document) -> List[Chunk]:
        """
        Chunk a document, copying its source and type onto every chunk.

        Args:
            doc: Document to chunk

        Returns:
            List of chunks without assigned handles
        """
        return [
            Chunk(
                content=text,
                source=doc.source,
                type=doc.type,
                chunk_index=idx
            )
            for idx, text in enumerate(self.split(doc.content))
        ]

    def get_stats(self, chunks: List[Chunk]) -> Dict[str, Any]:
        """
        Get statistics about chunked documents.

        Args:
            chunks: List of chunks

        Returns:
            Statistics dictionary
        """
        sizes = [len(c.content.split()) for c in chunks]
        avg_size = sum(sizes) / len(sizes) if sizes else 0

        return {
            "total_chunks": len(chunks),
            "unique_sources": len(set(c.source for c in chunks)),
            "avg_chunk_words": avg_size,
            "min_chunk_words": min(sizes) if sizes else 0,
            "max_chunk_words": max(sizes) if sizes else 0,
            "chunk_size": self.chunk_size
        }
