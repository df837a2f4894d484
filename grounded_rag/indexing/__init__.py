"""Indexing module for in-memory vector storage."""

from .vector_index import VectorIndex

__all__ = ["VectorIndex"]
