"""
Context Assembly Module

Turns ranked chunks into a prompt-ready context with source attribution.
"""

from typing import List

from ..models import RankedChunk

CONTEXT_PREAMBLE = "Based on the following information:\n\n"


class ContextAssembler:
    """Formats ranked chunks so every passage names its source."""

    def __init__(self, preamble: str = CONTEXT_PREAMBLE):
        self.preamble = preamble

    def assemble(self, ranked: List[RankedChunk]) -> str:
        """
        Build the context block for a query.

        Args:
            ranked: Retrieval results, best first

        Returns:
            Preamble followed by one `Source:` block per chunk, in rank order
        """
        parts = [self.preamble]
        for result in ranked:
            parts.append(f"Source: {result.chunk.source}\n")
            parts.append(f"{result.chunk.content}\n\n")
        return "".join(parts)

    @staticmethod
    def build_prompt(context: str, question: str) -> str:
        """
        Append the user question to an assembled context.

        Args:
            context: Output of `assemble`
            question: User question

        Returns:
            Full user prompt for the generation backend
        """
        return f"{context}\n\nQuestion: {question}"
