"""
Prior-Art Ranker - Blended Ranking
==================================
Scores candidates against one query context and orders them by

    similarity = 0.6 * semantic (embedding cosine) + 0.4 * keyword (overlap ratio)

Embedding failures never drop a candidate; it is ranked on keyword score alone.

License: MIT
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence

import numpy as np

from priorart.config import config, RankingConfig
from priorart.keywords import keyword_overlap_score
from priorart.models import CandidateRecord, QueryContext
from priorart.scoring import blended_score, try_cosine_similarity

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    async def try_embed(self, text: str) -> Optional[np.ndarray]:
        ...


class PriorArtRanker:
    """
    Blended semantic + keyword ranker.

    Embedding calls are capped at `embedding_candidate_limit` per search.
    The cap picks the best keyword matches rather than whatever source
    happened to be listed first.
    """

    def __init__(self, embedder: Optional[Embedder] = None, ranking_config: RankingConfig = None):
        self.embedder = embedder
        self.config = ranking_config or config.ranking

    async def rank(
        self,
        context: QueryContext,
        candidates: Sequence[CandidateRecord],
    ) -> List[CandidateRecord]:
        """
        Score and sort candidates, best first.

        Returns at most `embedding_candidate_limit` records. An empty
        candidate list yields an empty result.
        """
        if not candidates or context.is_empty:
            return []

        # 1. Keyword overlap for everything (local, cheap)
        for candidate in candidates:
            candidate.keyword_score = keyword_overlap_score(
                context.text, candidate.text, top_n=self.config.query_keyword_limit
            )

        # 2. Cost cap on embedding calls
        selected = sorted(candidates, key=lambda c: c.keyword_score, reverse=True)
        selected = selected[: self.config.embedding_candidate_limit]
        if len(selected) < len(candidates):
            logger.info(f"Embedding cap: scoring {len(selected)} of {len(candidates)} candidates")

        # 3. Semantic similarity
        query_embedding = None
        candidate_embeddings: List[Optional[np.ndarray]] = [None] * len(selected)
        if self.embedder is not None:
            query_embedding = await self.embedder.try_embed(context.text)
            if query_embedding is not None and not _usable(query_embedding):
                query_embedding = None
            if query_embedding is not None:
                candidate_embeddings = await self._embed_candidates(selected)
            else:
                logger.warning("Query embedding unavailable; ranking by keyword score only")

        # 4. Blend
        for candidate, embedding in zip(selected, candidate_embeddings):
            semantic = None
            if query_embedding is not None:
                semantic = try_cosine_similarity(query_embedding, embedding)

            # Missing or degenerate embeddings score 0 and stay flagged as unscored
            candidate.semantic_score = 0.0 if semantic is None else semantic
            candidate.semantically_scored = semantic is not None

            candidate.similarity_score = blended_score(
                candidate.semantic_score,
                candidate.keyword_score,
                self.config.semantic_weight,
                self.config.keyword_weight,
            )

        ranked = sorted(selected, key=lambda c: c.similarity_score, reverse=True)

        scored = sum(1 for c in ranked if c.semantically_scored)
        logger.info(
            f"Ranked {len(ranked)} candidates ({scored} semantically scored), "
            f"top score: {ranked[0].similarity_score:.4f}"
        )
        return ranked

    async def _embed_candidates(self, candidates: Sequence[CandidateRecord]) -> List[Optional[np.ndarray]]:
        semaphore = asyncio.Semaphore(max(1, self.config.embedding_concurrency))

        async def _embed(candidate: CandidateRecord) -> Optional[np.ndarray]:
            async with semaphore:
                return await self.embedder.try_embed(candidate.text)

        # gather keeps input order regardless of completion order
        return list(await asyncio.gather(*(_embed(c) for c in candidates)))

    def top(self, ranked: Sequence[CandidateRecord], k: int = None) -> List[CandidateRecord]:
        """Truncate a ranked list to the persisted/returned size."""
        k = self.config.result_limit if k is None else k
        return list(ranked[:k])


def _usable(vector: np.ndarray) -> bool:
    """A vector cosine similarity can be computed against."""
    norm = np.linalg.norm(np.asarray(vector, dtype=np.float64))
    return bool(norm > 0 and np.isfinite(norm))
