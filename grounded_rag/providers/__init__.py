"""Model providers for generation and embedding."""

from typing import Optional, Tuple

from ..config import RAGConfig
from ..errors import ValidationError
from .anthropic_provider import AnthropicProvider
from .base import Capability, ModelProvider
from .openai_provider import OpenAIProvider


def build_providers(config: RAGConfig) -> Tuple[ModelProvider, Optional[ModelProvider]]:
    """
    Create the generation/embedding backend pair for a configuration.

    Args:
        config: RAG configuration

    Returns:
        (generator, embedder). The embedder is None when no embedding-capable
        backend is configured; embedding then fails with CapabilityUnavailable.
    """
    openai = None
    if config.openai_api_key:
        openai = OpenAIProvider(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            chat_model=config.openai_chat_model,
            embedding_model=config.embedding_model,
            batch_size=config.embedding_batch_size,
            timeout=config.request_timeout
        )

    if config.generation_backend == "anthropic":
        if not config.anthropic_api_key:
            raise ValidationError("anthropic backend selected but no anthropic_api_key configured")
        generator = AnthropicProvider(
            api_key=config.anthropic_api_key,
            model=config.anthropic_model,
            timeout=config.request_timeout
        )
        return generator, openai

    if openai is None:
        raise ValidationError("openai backend selected but no openai_api_key configured")
    return openai, openai


__all__ = [
    "AnthropicProvider",
    "Capability",
    "ModelProvider",
    "OpenAIProvider",
    "build_providers"
]
