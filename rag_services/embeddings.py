"""
Embedding generation service using OpenAI
"""
from typing import List, Optional
import asyncio
from concurrent.futures import ThreadPoolExecutor
from openai import OpenAI


class EmbeddingService:
    """Handles embedding generation using OpenAI."""

    batch_size = 100

    def __init__(self, model: str = "text-embedding-3-small", api_key: Optional[str] = None):
        # Delay OpenAI client construction until first use so importing
        # modules does not fail when OPENAI_API_KEY is not set.
        self._client = None
        self._api_key = api_key
        self.model = model

    def _ensure_client(self):
        if self._client is None:
            try:
                self._client = OpenAI(api_key=self._api_key) if self._api_key else OpenAI()
            except Exception as e:
                raise RuntimeError(
                    "OpenAI client could not be initialized. "
                    "Set the OPENAI_API_KEY environment variable or pass an API key to the client. "
                    f"Original error: {e}"
                ) from e

    def _process_batch(self, batch: List[str]) -> List[List[float]]:
        """Process a single batch of embeddings."""
        response = self._client.embeddings.create(
            model=self.model,
            input=batch
        )
        return [d.embedding for d in response.data]

    async def get_embeddings_async(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings asynchronously with concurrent batch processing."""
        self._ensure_client()

        batches = [texts[i:i + self.batch_size] for i in range(0, len(texts), self.batch_size)]

        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=5) as executor:
            tasks = [
                loop.run_in_executor(executor, self._process_batch, batch)
                for batch in batches
            ]
            results = await asyncio.gather(*tasks)

        all_embeddings = []
        for batch_embeddings in results:
            all_embeddings.extend(batch_embeddings)

        return all_embeddings

    async def embed_query(self, text: str) -> List[float]:
        embeddings = await self.get_embeddings_async([text])
        return embeddings[0]
