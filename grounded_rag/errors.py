"""
Error Types

Exceptions and warnings raised by the RAG core and its provider adapters.
"""

from typing import Optional


class RAGError(Exception):
    """Base class for all grounded_rag errors."""


class ValidationError(RAGError, ValueError):
    """Invalid configuration value or argument."""


class CapabilityUnavailable(RAGError):
    """Raised when a backend is asked for something it cannot do."""

    def __init__(self, backend: str, capability: str):
        self.backend = backend
        self.capability = capability
        super().__init__(f"Backend '{backend}' does not support {capability}")


class ProviderError(RAGError):
    """
    Failure from an external model call.

    Wraps transport, auth, quota and empty-input failures. During ingestion
    the orchestrator re-raises it with the document source and chunk index
    attached so the failure can be logged without further lookups.
    """

    def __init__(
        self,
        message: str,
        backend: str,
        source: Optional[str] = None,
        chunk_index: Optional[int] = None
    ):
        self.message = message
        self.backend = backend
        self.source = source
        self.chunk_index = chunk_index
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [f"[{self.backend}] {self.message}"]
        if self.source is not None:
            parts.append(f"source={self.source!r}")
        if self.chunk_index is not None:
            parts.append(f"chunk={self.chunk_index}")
        return " ".join(parts)

    def with_context(
        self,
        source: Optional[str] = None,
        chunk_index: Optional[int] = None
    ) -> "ProviderError":
        """Return a copy of this error annotated with ingestion context."""
        return ProviderError(
            self.message,
            backend=self.backend,
            source=source if source is not None else self.source,
            chunk_index=chunk_index if chunk_index is not None else self.chunk_index
        )


class EmptyCorpusWarning(UserWarning):
    """Query ran against an index with no chunks; the answer is ungrounded."""
