"""
OpenAI-Compatible Provider

Sync/async HTTP clients for chat completions and embeddings against any
OpenAI-compatible API.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp
import requests
from tqdm import tqdm

from ..errors import ProviderError, ValidationError
from .base import Capability, ModelProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(ModelProvider):
    """
    Generation and embedding backend for OpenAI-compatible APIs.

    The only backend that can produce embeddings.
    """

    name = "openai"
    capabilities = frozenset({Capability.GENERATE, Capability.EMBED})

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.openai.com/v1",
        chat_model: str = "gpt-4o",
        embedding_model: str = "text-embedding-ada-002",
        batch_size: int = 32,
        max_retries: int = 3,
        timeout: float = 60.0,
        retry_delay: float = 1.0,
        show_progress: bool = False
    ):
        """
        Initialize the provider.

        Args:
            api_key: Optional API key for authentication
            base_url: API root (e.g., "http://localhost:30000/v1")
            chat_model: Model used for generation
            embedding_model: Model used for embeddings
            batch_size: Number of texts to embed in one request
            max_retries: Attempts per HTTP request before giving up
            timeout: Request timeout in seconds
            retry_delay: Seconds to wait between async retries
            show_progress: Show a progress bar for multi-batch embedding
        """
        if max_retries < 1:
            raise ValidationError(f"max_retries must be at least 1, got {max_retries}")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.chat_model = chat_model
        self.embedding_model = embedding_model
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.timeout = timeout
        self.retry_delay = retry_delay
        self.show_progress = show_progress

        # Set after the first successful embedding call
        self.embedding_dim = None

    def _headers(self) -> Dict[str, str]:
        """Build request headers, adding the bearer token when a key is set."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload with bounded retries.

        Args:
            path: Endpoint path relative to `base_url`
            payload: JSON request body

        Returns:
            Decoded JSON response

        Raises:
            ProviderError: Every attempt failed
        """
        url = f"{self.base_url}{path}"

        for attempt in range(self.max_retries):
            try:
                response = requests.post(
                    url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()

            except (requests.RequestException, ValueError) as e:
                if attempt == self.max_retries - 1:
                    raise ProviderError(
                        f"POST {path} failed after {self.max_retries} attempts: {e}",
                        backend=self.name
                    ) from e
                logger.warning(f"Retry {attempt + 1}/{self.max_retries} after error: {e}")

    def generate(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """
        Produce a chat completion.

        Args:
            system_prompt: System instruction
            user_prompt: User message (context + question)
            max_tokens: Generation length budget

        Returns:
            Text of the first choice
        """
        payload = {
            "model": self.chat_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "max_tokens": max_tokens
        }
        data = self._post("/chat/completions", payload)

        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Malformed chat completion response: {e}", backend=self.name) from e

    def embed(self, text: str) -> List[float]:
        """
        Embed a single text, e.g. a query.

        Args:
            text: Text to embed

        Returns:
            Embedding vector
        """
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty input", backend=self.name)
        return self.embed_many([text])[0]

    def embed_many(self, texts: List[str]) -> List[List[float]]:
        """
        Embed texts in batches of `batch_size`.

        Args:
            texts: List of texts to embed

        Returns:
            One vector per input text, in input order
        """
        self._check_inputs(texts)
        all_embeddings = []

        for i in tqdm(
            range(0, len(texts), self.batch_size),
            desc="Embedding texts",
            disable=not self.show_progress
        ):
            batch = texts[i:i + self.batch_size]
            data = self._post("/embeddings", {"input": batch, "model": self.embedding_model})
            all_embeddings.extend(self._parse_embeddings(data, len(batch)))

        self._record_dim(all_embeddings)
        return all_embeddings

    async def aembed_many(self, texts: List[str]) -> List[List[float]]:
        """
        Embed texts asynchronously, sending all batches concurrently.

        Args:
            texts: List of texts to embed

        Returns:
            One vector per input text, in input order

        Raises:
            ProviderError: Any batch failed; the first failure is raised once
                every batch has finished
        """
        self._check_inputs(texts)

        batches = [
            texts[i:i + self.batch_size]
            for i in range(0, len(texts), self.batch_size)
        ]

        async with aiohttp.ClientSession() as session:
            tasks = [self._embed_batch_async(session, batch) for batch in batches]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException):
                raise result

        all_embeddings = [emb for batch_embs in results for emb in batch_embs]
        self._record_dim(all_embeddings)
        return all_embeddings

    async def _embed_batch_async(
        self,
        session: aiohttp.ClientSession,
        texts: List[str]
    ) -> List[List[float]]:
        """Embed a batch of texts asynchronously."""
        payload = {"input": texts, "model": self.embedding_model}

        for attempt in range(self.max_retries):
            try:
                async with session.post(
                    f"{self.base_url}/embeddings",
                    json=payload,
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    response.raise_for_status()
                    data = await response.json()
                    return self._parse_embeddings(data, len(texts))

            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                if attempt == self.max_retries - 1:
                    raise ProviderError(
                        f"POST /embeddings failed after {self.max_retries} attempts: {e}",
                        backend=self.name
                    ) from e
                logger.warning(f"Retry {attempt + 1}/{self.max_retries} after error: {e}")
                await asyncio.sleep(self.retry_delay)

    def _check_inputs(self, texts: List[str]) -> None:
        """
        Reject an empty batch or any blank text before a request is sent.

        Args:
            texts: Texts about to be embedded
        """
        if not texts:
            raise ProviderError("No texts to embed", backend=self.name)
        for idx, text in enumerate(texts):
            if not text or not text.strip():
                raise ProviderError("Cannot embed empty input", backend=self.name, chunk_index=idx)

    def _parse_embeddings(self, data: Dict[str, Any], expected: int) -> List[List[float]]:
        """
        Extract vectors from an embeddings response, ordered by `index`.

        Args:
            data: Decoded response body
            expected: Number of texts in the request

        Returns:
            One vector per requested text
        """
        try:
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            embeddings = [item["embedding"] for item in items]
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderError(f"Malformed embedding response: {e}", backend=self.name) from e

        if len(embeddings) != expected:
            raise ProviderError(
                f"Expected {expected} embeddings, got {len(embeddings)}",
                backend=self.name
            )
        return embeddings

    def _record_dim(self, embeddings: List[List[float]]) -> None:
        """Remember the embedding dimension from the first successful call."""
        if self.embedding_dim is None and embeddings:
            self.embedding_dim = len(embeddings[0])

    def get_info(self) -> Dict[str, Any]:
        """Get client information."""
        return {
            **super().get_info(),
            "base_url": self.base_url,
            "chat_model": self.chat_model,
            "embedding_model": self.embedding_model,
            "batch_size": self.batch_size,
            "embedding_dim": self.embedding_dim,
            "has_api_key": self.api_key is not None
        }
