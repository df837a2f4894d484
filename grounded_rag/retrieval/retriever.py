"""
Vector Retrieval Module

Exact cosine-similarity ranking over the in-memory vector index.
"""

from typing import List, Sequence

import numpy as np

from ..errors import ValidationError
from ..indexing import VectorIndex
from ..models import RankedChunk


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity in double precision.

    Returns 0.0 when either vector has zero norm. The result is clipped to
    [-1, 1] to absorb rounding error.
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)

    if vec_a.shape != vec_b.shape:
        raise ValidationError(f"Vector shapes differ: {vec_a.shape} vs {vec_b.shape}")

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = np.dot(vec_a, vec_b) / (norm_a * norm_b)
    return float(np.clip(similarity, -1.0, 1.0))


class SimilarityRanker:
    """
    Scores every indexed chunk against a query vector.

    Linear scan, O(n * dim) per query. This is fine for hundreds to a few
    thousand chunks; larger corpora need an ANN index instead.
    """

    def __init__(self, index: VectorIndex):
        self.index = index

    def rank(self, query_vector: Sequence[float], k: int = 3) -> List[RankedChunk]:
        """
        Return the top-k chunks by descending cosine similarity.

        Equal scores keep ingestion order.

        Args:
            query_vector: Embedding of the query
            k: Maximum number of results

        Returns:
            At most k ranked chunks; empty if the index is empty
        """
        if k <= 0:
            raise ValidationError(f"k must be positive, got {k}")

        chunks, matrix = self.index.snapshot()
        if not chunks:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        if query.ndim != 1 or query.size != matrix.shape[1]:
            raise ValidationError(
                f"Query dimension {query.size} does not match index dimension {matrix.shape[1]}"
            )

        scores = self._score(matrix, query)

        # Stable sort so ties fall back to handle order
        order = np.argsort(-scores, kind="stable")[:k]

        return [
            RankedChunk(chunk=chunks[idx], score=float(scores[idx]), rank=rank)
            for rank, idx in enumerate(order)
        ]

    def _score(self, matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
        """Cosine similarity of every row against the query; 0 for zero norms."""
        denom = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        safe = np.where(denom == 0, 1.0, denom)
        scores = np.where(denom == 0, 0.0, dots / safe)
        return np.clip(scores, -1.0, 1.0)
