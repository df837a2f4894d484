"""Tests for the knowledge base loader."""

import asyncio
import logging

import aiohttp
import pytest

from grounded_rag import Document, DocumentSource, ProviderError, RAGConfig, RAGSystem
from grounded_rag.loaders import EXAMPLE_DOCUMENTS, fetch_sources, load_knowledge_base

from stubs import TokenOverlapEmbedder

SOURCES = [
    DocumentSource(url="https://example.com/k8s", name="K8s Guide", type="documentation"),
    DocumentSource(url="https://example.com/broken", name="Broken", type="article"),
    DocumentSource(url="https://example.com/aws", name="AWS Guide", type="article"),
]

PAGES = {
    "https://example.com/k8s": "Use resource requests and limits for every workload.",
    "https://example.com/aws": "Reserved Instances suit predictable workloads.",
}


async def fake_fetch(source: DocumentSource) -> Document:
    await asyncio.sleep(0)
    if source.url not in PAGES:
        raise aiohttp.ClientError(f"404 for {source.url}")
    return Document(content=PAGES[source.url], source=source.name, type=source.type)


class TestFetchSources:
    """Tests for fetch_sources."""

    @pytest.mark.asyncio
    async def test_failed_source_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="grounded_rag.loaders"):
            documents = await fetch_sources(SOURCES, max_concurrency=2, fetch=fake_fetch)

        assert [d.source for d in documents] == ["K8s Guide", "AWS Guide"]
        assert documents[0].type == "documentation"
        assert "https://example.com/broken" in caplog.text

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def tracking_fetch(source):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return Document(content="text", source=source.name)

        sources = [DocumentSource(url=f"https://example.com/{i}", name=str(i)) for i in range(6)]

        documents = await fetch_sources(sources, max_concurrency=2, fetch=tracking_fetch)

        assert len(documents) == 6
        assert peak == 2


class TestLoadKnowledgeBase:
    """Tests for load_knowledge_base."""

    @pytest.mark.asyncio
    async def test_loads_configured_sources(self, generator):
        config = RAGConfig(chunk_size=50, sources=SOURCES)
        rag = RAGSystem(generator, embedder=TokenOverlapEmbedder(), config=config, verbose=False)

        indexed = await load_knowledge_base(rag, fetch=fake_fetch)

        assert indexed == 2
        assert [c.source for c in rag.index.snapshot()[0]] == ["K8s Guide", "AWS Guide"]

    @pytest.mark.asyncio
    async def test_falls_back_to_example_documents(self, rag, caplog):
        with caplog.at_level(logging.WARNING, logger="grounded_rag.loaders"):
            indexed = await load_knowledge_base(rag)

        assert indexed == len(EXAMPLE_DOCUMENTS)
        assert {c.source for c in rag.index.snapshot()[0]} == {d.source for d in EXAMPLE_DOCUMENTS}
        assert "example documents" in caplog.text

    @pytest.mark.asyncio
    async def test_ingestion_failure_is_skipped(self, generator, config):
        class RejectingEmbedder(TokenOverlapEmbedder):
            def embed(self, text):
                if "Reserved" in text:
                    raise ProviderError("quota exceeded", backend=self.name)
                return super().embed(text)

        rag = RAGSystem(generator, embedder=RejectingEmbedder(), config=config, verbose=False)

        indexed = await load_knowledge_base(rag, sources=SOURCES, fetch=fake_fetch)

        assert indexed == 1
        assert {c.source for c in rag.index.snapshot()[0]} == {"K8s Guide"}

    @pytest.mark.asyncio
    async def test_explicit_empty_sources_use_examples(self, rag):
        indexed = await load_knowledge_base(rag, sources=[])

        assert indexed == len(EXAMPLE_DOCUMENTS)
