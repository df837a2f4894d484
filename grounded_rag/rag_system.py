"""
RAG System - Main Module

Provides high-level interface integrating all components.
"""

import asyncio
import logging
import warnings
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from tqdm import tqdm

from .chunking import DocumentChunker
from .config import RAGConfig, load_config
from .errors import CapabilityUnavailable, EmptyCorpusWarning, ProviderError, RAGError
from .indexing import VectorIndex
from .models import Chunk, Document, RankedChunk
from .providers import Capability, ModelProvider, build_providers
from .retrieval import ContextAssembler, SimilarityRanker

logger = logging.getLogger(__name__)

# Chunks of one document plus their embeddings, ready to commit
PreparedDocument = Tuple[List[Chunk], List[np.ndarray]]


class RAGSystem:
    """
    Complete RAG system integrating chunking, embedding, indexing, retrieval
    and generation.

    Simple API: `add_document` to build the corpus, `query` to answer
    questions from it. Each document is indexed atomically: if any of its
    chunks fails to embed, none of them is committed.
    """

    def __init__(
        self,
        generator: ModelProvider,
        embedder: Optional[ModelProvider] = None,
        config: Optional[RAGConfig] = None,
        verbose: bool = True
    ):
        """
        Initialize RAG system.

        Args:
            generator: Backend used to generate answers
            embedder: Backend used for embeddings; defaults to the generator
                when it can embed
            config: Immutable configuration (loaded from environment if None)
            verbose: Log progress messages and show progress bars
        """
        self.verbose = verbose
        self.config = config if config is not None else load_config()

        if not generator.supports(Capability.GENERATE):
            raise CapabilityUnavailable(generator.name, Capability.GENERATE.value)
        self.generator = generator

        if embedder is None and generator.supports(Capability.EMBED):
            embedder = generator
        self.embedder = embedder

        self.chunker = DocumentChunker(chunk_size=self.config.chunk_size)
        self.index = VectorIndex()
        self.ranker = SimilarityRanker(self.index)
        self.assembler = ContextAssembler()

        self._log(
            f"🔧 RAG system initialized (generator={generator.name}, "
            f"embedder={embedder.name if embedder else 'none'})"
        )

    @classmethod
    def from_config(cls, config: RAGConfig, verbose: bool = True) -> "RAGSystem":
        """Create a RAG system with the backends selected in `config`."""
        generator, embedder = build_providers(config)
        return cls(generator, embedder=embedder, config=config, verbose=verbose)

    def _log(self, message: str):
        """Log progress message if verbose."""
        if self.verbose:
            logger.info(message)

    def _require_embedder(self) -> ModelProvider:
        if self.embedder is None:
            raise CapabilityUnavailable(self.generator.name, Capability.EMBED.value)
        if not self.embedder.supports(Capability.EMBED):
            raise CapabilityUnavailable(self.embedder.name, Capability.EMBED.value)
        return self.embedder

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def _plan(self, doc: Document) -> Tuple[List[Chunk], List[Optional[np.ndarray]], List[str], List[int]]:
        """
        Chunk a document and split its chunks into cached and to-embed.

        Returns:
            (chunks, vectors with None where missing, unique texts to embed,
            chunk index of the first occurrence of each text to embed)
        """
        chunks = self.chunker.chunk_document(doc)
        vectors = [self.index.lookup_cached(chunk.content) for chunk in chunks]

        pending: List[str] = []
        positions: List[int] = []
        seen = set()
        for chunk, vector in zip(chunks, vectors):
            if vector is None and chunk.content not in seen:
                seen.add(chunk.content)
                pending.append(chunk.content)
                positions.append(chunk.chunk_index)

        return chunks, vectors, pending, positions

    def _fill(
        self,
        chunks: List[Chunk],
        vectors: List[Optional[np.ndarray]],
        pending: List[str],
        embedded: Sequence[Sequence[float]]
    ) -> List[np.ndarray]:
        if len(embedded) != len(pending):
            raise ProviderError(
                f"Expected {len(pending)} embeddings, got {len(embedded)}",
                backend=self.embedder.name,
                source=chunks[0].source if chunks else None
            )
        by_text = {text: np.asarray(vec, dtype=np.float64) for text, vec in zip(pending, embedded)}
        return [
            vector if vector is not None else by_text[chunk.content]
            for chunk, vector in zip(chunks, vectors)
        ]

    @staticmethod
    def _annotate(error: ProviderError, doc: Document, positions: List[int]) -> ProviderError:
        """Attach the document source and chunk index to an embedding failure."""
        chunk_index = None
        if error.chunk_index is not None and 0 <= error.chunk_index < len(positions):
            chunk_index = positions[error.chunk_index]
        return ProviderError(
            error.message,
            backend=error.backend,
            source=doc.source,
            chunk_index=chunk_index
        )

    def _prepare(self, doc: Document) -> PreparedDocument:
        embedder = self._require_embedder()
        chunks, vectors, pending, positions = self._plan(doc)

        embedded: List[List[float]] = []
        if pending:
            try:
                embedded = embedder.embed_many(pending)
            except ProviderError as e:
                raise self._annotate(e, doc, positions) from e

        return chunks, self._fill(chunks, vectors, pending, embedded)

    async def _aprepare(self, doc: Document) -> PreparedDocument:
        embedder = self._require_embedder()
        chunks, vectors, pending, positions = self._plan(doc)

        embedded: List[List[float]] = []
        if pending:
            try:
                embedded = await embedder.aembed_many(pending)
            except ProviderError as e:
                raise self._annotate(e, doc, positions) from e

        return chunks, self._fill(chunks, vectors, pending, embedded)

    def _commit(self, doc: Document, prepared: PreparedDocument) -> int:
        chunks, vectors = prepared
        committed = self.index.add(chunks, vectors)
        self._log(f"📄 Indexed {len(committed)} chunks from '{doc.source}'")
        return len(committed)

    def add_document(self, doc: Document) -> int:
        """
        Chunk, embed and index a document.

        Args:
            doc: Document to ingest

        Returns:
            Number of chunks added

        Raises:
            CapabilityUnavailable: No embedding-capable backend configured
            ProviderError: A chunk failed to embed; the index is unchanged
        """
        return self._commit(doc, self._prepare(doc))

    async def aadd_document(self, doc: Document) -> int:
        """
        Async variant of `add_document`.

        Cancellation before the embeddings return leaves the index unchanged.
        """
        prepared = await self._aprepare(doc)
        return self._commit(doc, prepared)

    def add_documents(self, documents: List[Document]) -> List[int]:
        """
        Index documents one after another.

        Stops at the first failing document; documents before it stay indexed.

        Returns:
            Chunk count per document
        """
        counts = []
        for doc in tqdm(documents, desc="Indexing documents", disable=not self.verbose):
            counts.append(self.add_document(doc))
        return counts

    async def aadd_documents(
        self,
        documents: List[Document],
        raise_on_error: bool = True
    ) -> List[Union[int, BaseException]]:
        """
        Index documents concurrently with bounded parallelism.

        Embeddings are computed concurrently (at most `max_concurrency`
        documents in flight); commits happen afterwards in input order so
        chunk handles do not depend on completion order.

        Args:
            documents: Documents to ingest
            raise_on_error: Re-raise the first failure after committing every
                document that succeeded

        Returns:
            Per document, the chunk count or the exception that aborted it
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def prepare(doc: Document) -> PreparedDocument:
            async with semaphore:
                return await self._aprepare(doc)

        self._log(f"📚 Indexing {len(documents)} documents (max_concurrency={self.config.max_concurrency})")
        results = await asyncio.gather(*(prepare(doc) for doc in documents), return_exceptions=True)

        outcomes: List[Union[int, BaseException]] = []
        for doc, result in zip(documents, results):
            if isinstance(result, BaseException):
                logger.warning(f"Failed to index document '{doc.source}': {result}")
                outcomes.append(result)
            else:
                try:
                    outcomes.append(self._commit(doc, result))
                except RAGError as e:
                    logger.warning(f"Failed to commit document '{doc.source}': {e}")
                    outcomes.append(e)

        if raise_on_error:
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome

        return outcomes

    # ------------------------------------------------------------------
    # Retrieval and generation
    # ------------------------------------------------------------------

    def search(self, question: str, top_k: Optional[int] = None) -> List[RankedChunk]:
        """
        Rank indexed chunks against a question.

        Args:
            question: Natural-language query
            top_k: Number of results (defaults to config.top_k)

        Returns:
            Ranked chunks, best first
        """
        embedder = self._require_embedder()
        query_vector = embedder.embed(question)

        if len(self.index) == 0:
            logger.warning("Querying an empty index; the answer will not be grounded")
            warnings.warn("No documents have been indexed", EmptyCorpusWarning, stacklevel=2)

        return self.ranker.rank(query_vector, k=top_k if top_k is not None else self.config.top_k)

    def query(self, question: str, top_k: Optional[int] = None) -> str:
        """
        Answer a question from the indexed documents.

        Args:
            question: Natural-language question
            top_k: Number of chunks in the context window

        Returns:
            Generated answer text
        """
        ranked = self.search(question, top_k)
        context = self.assembler.assemble(ranked)
        prompt = self.assembler.build_prompt(context, question)

        self._log(f"🔍 Generating answer from {len(ranked)} chunks with {self.generator.name}")
        return self.generator.generate(self.config.system_prompt, prompt, self.config.max_tokens)

    def get_stats(self) -> Dict[str, Any]:
        """Get system statistics."""
        return {
            "chunker_config": {
                "chunk_size": self.chunker.chunk_size
            },
            "generation": {
                **self.generator.get_info(),
                "max_tokens": self.config.max_tokens
            },
            "embedding_info": self.embedder.get_info() if self.embedder else None,
            "index_stats": self.index.get_stats()
        }
