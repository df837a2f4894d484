"""
Vector Index Module

In-memory chunk arena with per-handle embeddings and a content-hash cache.
"""

import dataclasses
import hashlib
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ValidationError
from ..models import Chunk

logger = logging.getLogger(__name__)


def content_key(text: str) -> str:
    """Cache key for a chunk's text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class VectorIndex:
    """
    Stores chunks and their embeddings in memory.

    Chunks get monotonically increasing integer handles in commit order, and
    each handle has exactly one vector. Identical texts share a single entry
    in the content cache so they are embedded once, but every ingestion is
    still recorded in the chunk list.

    Appends happen under a lock and readers take a snapshot, so ranking is
    safe while another task is ingesting.
    """

    def __init__(self):
        self._chunks: List[Chunk] = []
        self._vectors: List[np.ndarray] = []
        self._cache: Dict[str, np.ndarray] = {}
        self._matrix: Optional[np.ndarray] = None  # stacked vectors, rebuilt lazily
        self._lock = threading.Lock()
        self.dimension: Optional[int] = None

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def lookup_cached(self, text: str) -> Optional[np.ndarray]:
        """Return the cached vector for `text`, if any."""
        with self._lock:
            return self._cache.get(content_key(text))

    def add(self, chunks: Sequence[Chunk], vectors: Sequence[Sequence[float]]) -> List[Chunk]:
        """
        Commit a batch of chunks atomically.

        Either every chunk is appended or, on a validation failure, none is.

        Args:
            chunks: Chunks to add (handles are assigned here)
            vectors: One embedding per chunk

        Returns:
            The committed chunks with `chunk_id` set
        """
        if len(chunks) != len(vectors):
            raise ValidationError(f"Chunks ({len(chunks)}) and vectors ({len(vectors)}) length mismatch")

        arrays = [np.asarray(v, dtype=np.float64) for v in vectors]

        with self._lock:
            dim = self.dimension
            for arr in arrays:
                if arr.ndim != 1 or arr.size == 0:
                    raise ValidationError(f"Embedding must be a non-empty 1-D vector, got shape {arr.shape}")
                if dim is None:
                    dim = arr.size
                elif arr.size != dim:
                    raise ValidationError(f"Embedding dimension {arr.size} does not match index dimension {dim}")

            committed = []
            for chunk, arr in zip(chunks, arrays):
                handle = len(self._chunks)
                stored = dataclasses.replace(chunk, chunk_id=handle)
                self._chunks.append(stored)
                self._vectors.append(arr)
                self._cache.setdefault(content_key(chunk.content), arr)
                committed.append(stored)

            self.dimension = dim
            if committed:
                self._matrix = None

        logger.debug(f"Added {len(committed)} chunks. Total: {len(self._chunks)}")
        return committed

    def ingest(self, chunk: Chunk, vector: Sequence[float]) -> Chunk:
        """Append a single chunk and its embedding."""
        return self.add([chunk], [vector])[0]

    def snapshot(self) -> Tuple[List[Chunk], np.ndarray]:
        """
        Consistent read-only view of the index.

        Returns:
            (chunks, matrix) where row i of the (n, dim) float64 matrix is the
            embedding of chunks[i]
        """
        with self._lock:
            if self._matrix is None:
                if self._vectors:
                    self._matrix = np.vstack(self._vectors)
                else:
                    self._matrix = np.empty((0, self.dimension or 0), dtype=np.float64)
            return list(self._chunks), self._matrix

    def get_chunk(self, chunk_id: int) -> Optional[Chunk]:
        """Retrieve a chunk by handle, or None if out of range."""
        with self._lock:
            if 0 <= chunk_id < len(self._chunks):
                return self._chunks[chunk_id]
        return None

    def get_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        with self._lock:
            return {
                "total_chunks": len(self._chunks),
                "cached_embeddings": len(self._cache),
                "embedding_dim": self.dimension,
                "sources": len(set(c.source for c in self._chunks))
            }
