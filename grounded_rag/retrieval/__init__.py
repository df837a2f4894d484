"""Retrieval module for similarity ranking and context assembly."""

from .context import ContextAssembler
from .retriever import SimilarityRanker, cosine_similarity

__all__ = ["ContextAssembler", "SimilarityRanker", "cosine_similarity"]
