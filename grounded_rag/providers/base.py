"""
Model Provider Interface

Capability-scoped abstraction over text generation and embedding backends.
"""

import asyncio
from enum import Enum
from typing import FrozenSet, List

from ..errors import CapabilityUnavailable, ProviderError


class Capability(str, Enum):
    GENERATE = "generate"
    EMBED = "embed"


class ModelProvider:
    """
    Base class for model backends.

    Subclasses declare what they can do in `capabilities` and override the
    matching methods. Callers check `supports()` instead of branching on the
    concrete backend type.
    """

    name: str = "provider"
    capabilities: FrozenSet[Capability] = frozenset()

    def supports(self, capability: Capability) -> bool:
        """
        Check whether this backend offers a capability.

        Args:
            capability: Capability to look up

        Returns:
            True if the matching method is implemented
        """
        return capability in self.capabilities

    def generate(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """
        Produce a completion for the given instruction and prompt.

        Args:
            system_prompt: System instruction
            user_prompt: User message (context + question)
            max_tokens: Generation length budget

        Returns:
            Generated answer text
        """
        raise CapabilityUnavailable(self.name, Capability.GENERATE.value)

    def embed(self, text: str) -> List[float]:
        """Embed a single text into a fixed-length vector."""
        raise CapabilityUnavailable(self.name, Capability.EMBED.value)

    def embed_many(self, texts: List[str]) -> List[List[float]]:
        """
        Embed multiple texts, preserving order.

        The default issues one `embed` call per text; backends with a batch
        endpoint override this.
        """
        if not self.supports(Capability.EMBED):
            raise CapabilityUnavailable(self.name, Capability.EMBED.value)

        embeddings = []
        for idx, text in enumerate(texts):
            try:
                embeddings.append(self.embed(text))
            except ProviderError as e:
                raise e.with_context(chunk_index=idx) from e
        return embeddings

    async def aembed_many(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts asynchronously (worker thread by default)."""
        if not self.supports(Capability.EMBED):
            raise CapabilityUnavailable(self.name, Capability.EMBED.value)
        return await asyncio.to_thread(self.embed_many, texts)

    def get_info(self) -> dict:
        return {
            "name": self.name,
            "capabilities": sorted(c.value for c in self.capabilities)
        }
