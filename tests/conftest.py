"""Pytest configuration and shared fixtures."""

import os

import pytest

from grounded_rag import RAGConfig, RAGSystem

from stubs import RecordingGenerator, TokenOverlapEmbedder


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep RAG_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("RAG_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config():
    return RAGConfig(chunk_size=3, max_tokens=256, top_k=3, max_concurrency=2)


@pytest.fixture
def embedder():
    return TokenOverlapEmbedder()


@pytest.fixture
def generator():
    return RecordingGenerator()


@pytest.fixture
def rag(generator, embedder, config):
    return RAGSystem(generator, embedder=embedder, config=config, verbose=False)
