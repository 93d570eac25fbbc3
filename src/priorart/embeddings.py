"""
Prior-Art Ranker - Embeddings
=============================
OpenAI text embeddings for semantic similarity scoring.

License: MIT
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from openai import AsyncOpenAI

from priorart.config import config, OpenAIConfig
from priorart.exceptions import ConfigurationError
from priorart.retrying import external_retry

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """Embedding client backed by the OpenAI embeddings endpoint."""

    def __init__(
        self,
        openai_config: OpenAIConfig = None,
        client: AsyncOpenAI = None,
        max_attempts: int = None,
    ):
        self.config = openai_config or config.openai
        self.max_attempts = max_attempts or config.sources.max_attempts

        if client is not None:
            self.client = client
        else:
            if not self.config.api_key:
                raise ConfigurationError("OPENAI_API_KEY not set. Check .env file.")
            self.client = AsyncOpenAI(api_key=self.config.api_key, max_retries=0)

    async def embed_text(self, text: str) -> np.ndarray:
        """Generate an embedding vector for text."""
        text = text[: self.config.embedding_max_chars]

        async for attempt in external_retry(self.max_attempts):
            with attempt:
                response = await self.client.embeddings.create(
                    model=self.config.embedding_model,
                    input=text,
                )
        return np.array(response.data[0].embedding, dtype=np.float32)

    async def try_embed(self, text: str) -> Optional[np.ndarray]:
        """Best-effort embedding: None when the service fails."""
        if not text or not text.strip():
            return None
        try:
            return await self.embed_text(text)
        except Exception as e:
            logger.warning(f"Embedding failed ({type(e).__name__}): {e}")
            return None
