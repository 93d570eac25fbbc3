from types import SimpleNamespace

import numpy as np
import pytest

from priorart.config import OpenAIConfig
from priorart.embeddings import OpenAIEmbedder
from priorart.exceptions import ConfigurationError


class FakeEmbeddings:
    def __init__(self, vector=None, error=None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=[SimpleNamespace(embedding=self.vector)])


def _embedder(embeddings, max_chars=8000) -> OpenAIEmbedder:
    cfg = OpenAIConfig(api_key="", embedding_model="text-embedding-3-small", embedding_max_chars=max_chars)
    return OpenAIEmbedder(cfg, client=SimpleNamespace(embeddings=embeddings), max_attempts=1)


async def test_embed_text_returns_float_vector():
    embeddings = FakeEmbeddings(vector=[1.0, 2.0])
    vector = await _embedder(embeddings).embed_text("solar tiles")

    assert isinstance(vector, np.ndarray)
    assert vector.dtype == np.float32
    assert vector.tolist() == [1.0, 2.0]
    assert embeddings.calls[0]["model"] == "text-embedding-3-small"


async def test_input_is_truncated():
    embeddings = FakeEmbeddings()
    await _embedder(embeddings, max_chars=10).embed_text("x" * 50)
    assert embeddings.calls[0]["input"] == "x" * 10


async def test_try_embed_swallows_service_failure():
    embedder = _embedder(FakeEmbeddings(error=ConnectionError("down")))
    assert await embedder.try_embed("solar tiles") is None


async def test_try_embed_skips_blank_text():
    embeddings = FakeEmbeddings()
    assert await _embedder(embeddings).try_embed("  ") is None
    assert embeddings.calls == []


def test_missing_api_key_without_client():
    with pytest.raises(ConfigurationError):
        OpenAIEmbedder(OpenAIConfig(api_key=""))
