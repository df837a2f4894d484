"""
Grounded RAG

A small retrieval-augmented answering engine: word chunking, embedding,
in-memory cosine ranking, context assembly and grounded generation.
"""

from .chunking import DocumentChunker
from .config import DocumentSource, RAGConfig, load_config
from .errors import (
    CapabilityUnavailable,
    EmptyCorpusWarning,
    ProviderError,
    RAGError,
    ValidationError
)
from .indexing import VectorIndex
from .loaders import load_knowledge_base
from .models import Chunk, Document, RankedChunk
from .providers import AnthropicProvider, Capability, ModelProvider, OpenAIProvider, build_providers
from .rag_system import RAGSystem
from .retrieval import ContextAssembler, SimilarityRanker, cosine_similarity

__version__ = "0.1.0"

__all__ = [
    "AnthropicProvider",
    "Capability",
    "CapabilityUnavailable",
    "Chunk",
    "ContextAssembler",
    "Document",
    "DocumentChunker",
    "DocumentSource",
    "EmptyCorpusWarning",
    "ModelProvider",
    "OpenAIProvider",
    "ProviderError",
    "RAGConfig",
    "RAGError",
    "RAGSystem",
    "RankedChunk",
    "SimilarityRanker",
    "ValidationError",
    "VectorIndex",
    "build_providers",
    "cosine_similarity",
    "load_config",
    "load_knowledge_base"
]
