"""Shared fakes for the network collaborators."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np
import pytest

from priorart.config import RankingConfig
from priorart.keywords import KeywordExtractor
from priorart.models import CandidateRecord
from priorart.search_agent import PriorArtSearchAgent
from priorart.storage import InMemoryResultStore


class BagOfWordsEmbedder:
    """Deterministic embedder: keyword counts over a fixed vocabulary plus a bias term."""

    def __init__(self, vocabulary: Sequence[str]):
        self.vocabulary = list(vocabulary)
        self.calls: List[str] = []

    async def try_embed(self, text: str) -> Optional[np.ndarray]:
        self.calls.append(text)
        words = KeywordExtractor.extract(text)
        vector = [1.0] + [float(w in words) for w in self.vocabulary]
        return np.array(vector, dtype=np.float32)


class DownEmbedder:
    """Embedding service that is unavailable."""

    def __init__(self):
        self.calls = 0

    async def try_embed(self, text: str) -> Optional[np.ndarray]:
        self.calls += 1
        return None


class FakeSource:
    """Patent source returning a canned candidate list."""

    def __init__(self, name: str, candidates: Sequence[CandidateRecord] = ()):
        self.name = name
        self.candidates = list(candidates)
        self.queries: List[str] = []

    def build_query(self, keywords, context):
        return " ".join(keywords[:5])

    async def search(self, query: str) -> List[CandidateRecord]:
        self.queries.append(query)
        if not query.strip():
            return []
        results = [
            CandidateRecord(
                title=c.title,
                publication_number=c.publication_number,
                summary=c.summary,
                url=c.url,
                assignee=c.assignee,
                patent_date=c.patent_date,
            )
            for c in self.candidates
        ]
        for r in results:
            r.source = self.name
        return results


class BrokenSource(FakeSource):
    async def search(self, query: str) -> List[CandidateRecord]:
        self.queries.append(query)
        raise RuntimeError("connection reset")


def make_candidate(number: str, title: str, summary: str) -> CandidateRecord:
    return CandidateRecord(
        title=title,
        publication_number=number,
        summary=summary,
        url=f"https://patents.google.com/patent/{number}",
    )


@pytest.fixture
def ranking_config() -> RankingConfig:
    return RankingConfig(
        semantic_weight=0.6,
        keyword_weight=0.4,
        embedding_candidate_limit=20,
        result_limit=15,
        query_keyword_limit=10,
        embedding_concurrency=5,
        analysis_threshold=0.3,
        enable_overlap_analysis=True,
    )


@pytest.fixture
def store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def make_agent(ranking_config, store):
    def _make(sources, embedder=None, result_store=None) -> PriorArtSearchAgent:
        return PriorArtSearchAgent(
            embedder=embedder,
            sources=sources,
            store=result_store if result_store is not None else store,
            ranking_config=ranking_config,
            use_openai=False,
        )
    return _make
