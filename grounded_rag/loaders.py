"""
Knowledge Base Loader

Fetches configured document sources concurrently and feeds them to a
RAGSystem. A source that fails to fetch or index is logged and skipped; the
rest of the corpus is still built.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import aiohttp

from .config import DocumentSource
from .models import Document
from .rag_system import RAGSystem

logger = logging.getLogger(__name__)

FetchFn = Callable[[DocumentSource], Awaitable[Document]]

EXAMPLE_DOCUMENTS = [
    Document(
        content=(
            "Kubernetes is a portable, extensible, open source platform for managing containerized "
            "workloads and services. The best practices for deploying Kubernetes include: using a "
            "managed Kubernetes service like GKE, EKS, or AKS; implementing proper resource requests "
            "and limits; setting up monitoring and alerting; using Helm for package management; and "
            "implementing a robust CI/CD pipeline for deployments."
        ),
        source="Kubernetes Best Practices",
        type="documentation"
    ),
    Document(
        content=(
            "When optimizing AWS EC2 costs, consider: using Reserved Instances for predictable "
            "workloads; implementing auto-scaling groups; choosing the right instance types; "
            "regularly reviewing and terminating unused resources; using Spot Instances for "
            "fault-tolerant workloads; and leveraging AWS Cost Explorer for detailed analysis."
        ),
        source="AWS Cost Optimization Guide",
        type="article"
    ),
    Document(
        content=(
            "Container security best practices include: scanning images for vulnerabilities; using "
            "minimal base images; implementing network policies; running containers with least "
            "privileges; using immutable infrastructure; and implementing a zero-trust security model."
        ),
        source="Container Security Guidelines",
        type="documentation"
    )
]


async def fetch_source(
    session: aiohttp.ClientSession,
    source: DocumentSource,
    timeout: float = 60.0
) -> Document:
    """
    Download one source and wrap its body as a Document.

    Args:
        session: Shared HTTP session
        source: Source to fetch
        timeout: Total request timeout in seconds

    Returns:
        Document named after the source
    """
    async with session.get(source.url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
        response.raise_for_status()
        content = await response.text()

    return Document(content=content, source=source.name, type=source.type)


async def fetch_sources(
    sources: List[DocumentSource],
    max_concurrency: int = 4,
    timeout: float = 60.0,
    fetch: Optional[FetchFn] = None
) -> List[Document]:
    """
    Fetch sources with bounded concurrency, skipping failures.

    Args:
        sources: Sources to fetch
        max_concurrency: Maximum downloads in flight
        timeout: Per-request timeout in seconds
        fetch: Custom fetch coroutine (defaults to an HTTP GET)

    Returns:
        Documents for every source that was fetched, in source order
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def run(fetch_one: FetchFn, source: DocumentSource) -> Document:
        async with semaphore:
            logger.info(f"Loading document from {source.url}...")
            return await fetch_one(source)

    async def gather_all(fetch_one: FetchFn):
        return await asyncio.gather(
            *(run(fetch_one, source) for source in sources),
            return_exceptions=True
        )

    if fetch is not None:
        results = await gather_all(fetch)
    else:
        async with aiohttp.ClientSession() as session:
            results = await gather_all(lambda source: fetch_source(session, source, timeout))

    documents = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.warning(f"Failed to fetch document from {source.url}: {result}")
            continue
        documents.append(result)

    return documents


async def load_knowledge_base(
    rag: RAGSystem,
    sources: Optional[List[DocumentSource]] = None,
    fetch: Optional[FetchFn] = None
) -> int:
    """
    Populate a RAG system from remote sources.

    Falls back to EXAMPLE_DOCUMENTS when no sources are given or configured.

    Args:
        rag: System to populate
        sources: Sources to load (defaults to rag.config.sources)
        fetch: Custom fetch coroutine, mainly for tests

    Returns:
        Number of documents indexed
    """
    if sources is None:
        sources = rag.config.sources

    if not sources:
        logger.warning("No document sources configured. Using example documents.")
        documents = list(EXAMPLE_DOCUMENTS)
    else:
        documents = await fetch_sources(
            sources,
            max_concurrency=rag.config.max_concurrency,
            timeout=rag.config.request_timeout,
            fetch=fetch
        )

    outcomes = await rag.aadd_documents(documents, raise_on_error=False)
    indexed = sum(1 for outcome in outcomes if not isinstance(outcome, BaseException))

    logger.info(f"Knowledge base loaded: {indexed}/{len(documents)} documents indexed")
    return indexed
