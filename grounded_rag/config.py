"""
RAG System Configuration

Centralized, immutable configuration for all RAG components including:
- Chunking parameters
- Generation budget and retrieval width
- Backend selection and credentials
- Knowledge base sources
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ValidationError

DEFAULT_SYSTEM_PROMPT = (
    "You are an infrastructure optimization expert. Use the provided context to answer "
    "questions about infrastructure, services, and container deployments. Provide clear, "
    "actionable recommendations without implementing them directly."
)


class DocumentSource(BaseModel):
    """A remote document to load into the knowledge base."""

    url: str
    name: str
    type: str = "article"


class RAGConfig(BaseSettings):
    """Configuration for the RAG system. Read-only once constructed."""

    model_config = SettingsConfigDict(
        env_prefix="RAG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    # Chunking
    chunk_size: int = Field(
        default=1000,
        gt=0,
        description="Maximum words per chunk"
    )

    # Generation
    max_tokens: int = Field(
        default=4000,
        gt=0,
        description="Max tokens for generated answers"
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System instruction sent with every query"
    )

    # Retrieval
    top_k: int = Field(
        default=3,
        gt=0,
        description="Number of chunks placed in the context window"
    )

    # Ingestion and transport
    max_concurrency: int = Field(
        default=4,
        gt=0,
        description="Documents fetched/embedded concurrently"
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for each backend or fetch call"
    )

    # Backends
    generation_backend: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="Backend used for answer generation"
    )
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible API"
    )
    openai_chat_model: str = Field(default="gpt-4o", description="OpenAI chat model")
    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model name"
    )
    embedding_batch_size: int = Field(
        default=32,
        gt=0,
        description="Texts per embedding request"
    )
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(
        default="claude-3-7-sonnet-latest",
        description="Anthropic model identifier"
    )

    # Knowledge base
    sources: List[DocumentSource] = Field(
        default_factory=list,
        description="Remote documents loaded at startup"
    )


def load_config(**overrides) -> RAGConfig:
    """
    Build configuration from the environment plus explicit overrides.

    Args:
        **overrides: Field values taking precedence over the environment

    Returns:
        Validated RAGConfig

    Raises:
        ValidationError: If any value is out of range
    """
    try:
        return RAGConfig(**overrides)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid RAG configuration: {e}") from e
