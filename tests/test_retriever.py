"""Unit tests for cosine similarity, ranking and context assembly."""

import math
import random

import pytest

from grounded_rag import (
    Chunk,
    ContextAssembler,
    RankedChunk,
    SimilarityRanker,
    ValidationError,
    VectorIndex,
    cosine_similarity
)


def vector_with_score(score: float):
    """2-D unit vector whose cosine with [1, 0] equals `score`."""
    return [score, math.sqrt(1.0 - score * score)]


def build_index(scores, order=None):
    index = VectorIndex()
    order = order if order is not None else range(len(scores))
    for i in order:
        chunk = Chunk(content=f"chunk-{i}", source=f"src-{i}", type="article", chunk_index=0)
        index.ingest(chunk, vector_with_score(scores[i]))
    return index


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-2.0, 0.0]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 3.0]) == pytest.approx(0.0)

    def test_symmetric_and_bounded(self):
        rng = random.Random(7)
        for _ in range(50):
            a = [rng.uniform(-5, 5) for _ in range(16)]
            b = [rng.uniform(-5, 5) for _ in range(16)]

            ab = cosine_similarity(a, b)

            assert ab == cosine_similarity(b, a)
            assert -1.0 <= ab <= 1.0

    @pytest.mark.parametrize("a, b", [
        ([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]),
        ([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]),
        ([0.0, 0.0], [0.0, 0.0]),
    ])
    def test_zero_vector_scores_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0

    def test_long_vectors_stay_bounded(self):
        a = [1e-3] * 100_000
        assert cosine_similarity(a, a) == pytest.approx(1.0)
        assert cosine_similarity(a, a) <= 1.0

    def test_shape_mismatch(self):
        with pytest.raises(ValidationError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


class TestSimilarityRanker:
    """Tests for SimilarityRanker.rank."""

    SCORES = [0.9, 0.7, 0.5, 0.3, 0.1]

    def test_top_three_of_five(self):
        index = build_index(self.SCORES, order=[3, 0, 4, 2, 1])

        results = SimilarityRanker(index).rank([1.0, 0.0], k=3)

        assert [r.chunk.content for r in results] == ["chunk-0", "chunk-1", "chunk-2"]
        assert [r.score for r in results] == pytest.approx([0.9, 0.7, 0.5])
        assert [r.rank for r in results] == [0, 1, 2]

    def test_k_larger_than_index_returns_all(self):
        index = build_index(self.SCORES)

        results = SimilarityRanker(index).rank([1.0, 0.0], k=10)

        assert len(results) == 5
        assert [r.score for r in results] == pytest.approx(self.SCORES)

    def test_ties_keep_ingestion_order(self):
        index = VectorIndex()
        for i, vector in enumerate([[0.0, 1.0], [1.0, 0.0], [0.0, 1.0], [1.0, 0.0]]):
            index.ingest(Chunk(content=f"c{i}", source="s", type="t", chunk_index=i), vector)

        results = SimilarityRanker(index).rank([1.0, 0.0], k=4)

        assert [r.chunk.content for r in results] == ["c1", "c3", "c0", "c2"]
        assert [r.chunk.chunk_id for r in results] == [1, 3, 0, 2]

    def test_zero_vector_chunk_scores_zero(self):
        index = VectorIndex()
        index.ingest(Chunk(content="zero", source="s", type="t", chunk_index=0), [0.0, 0.0])
        index.ingest(Chunk(content="neg", source="s", type="t", chunk_index=1), [-1.0, 0.0])

        results = SimilarityRanker(index).rank([1.0, 0.0], k=2)

        assert [(r.chunk.content, r.score) for r in results] == [("zero", 0.0), ("neg", -1.0)]

    def test_zero_query_vector(self):
        index = build_index(self.SCORES)

        results = SimilarityRanker(index).rank([0.0, 0.0], k=5)

        assert all(r.score == 0.0 for r in results)
        assert [r.chunk.chunk_id for r in results] == [0, 1, 2, 3, 4]

    def test_empty_index_returns_nothing(self):
        assert SimilarityRanker(VectorIndex()).rank([1.0, 0.0], k=3) == []

    @pytest.mark.parametrize("k", [0, -3])
    def test_non_positive_k_rejected(self, k):
        with pytest.raises(ValidationError):
            SimilarityRanker(build_index(self.SCORES)).rank([1.0, 0.0], k=k)

    def test_query_dimension_mismatch(self):
        with pytest.raises(ValidationError):
            SimilarityRanker(build_index(self.SCORES)).rank([1.0, 0.0, 0.0], k=3)


class TestContextAssembler:
    """Tests for ContextAssembler."""

    def ranked(self, *items):
        return [
            RankedChunk(
                chunk=Chunk(content=content, source=source, type="article", chunk_index=0),
                score=1.0,
                rank=rank
            )
            for rank, (source, content) in enumerate(items)
        ]

    def test_format_preserves_order_and_sources(self):
        context = ContextAssembler().assemble(self.ranked(
            ("AWS Cost Optimization Guide", "Use Spot Instances."),
            ("Kubernetes Best Practices", "Set resource limits.")
        ))

        assert context == (
            "Based on the following information:\n\n"
            "Source: AWS Cost Optimization Guide\n"
            "Use Spot Instances.\n\n"
            "Source: Kubernetes Best Practices\n"
            "Set resource limits.\n\n"
        )

    def test_empty_context_is_preamble(self):
        assert ContextAssembler().assemble([]) == "Based on the following information:\n\n"

    def test_build_prompt(self):
        prompt = ContextAssembler.build_prompt("CTX", "How do I scale?")

        assert prompt == "CTX\n\nQuestion: How do I scale?"
