"""Chunking module for splitting documents into word-bounded chunks."""

from .chunker import DocumentChunker

__all__ = ["DocumentChunker"]
