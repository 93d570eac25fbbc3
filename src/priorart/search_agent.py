"""
Prior-Art Ranker - Search Agent
===============================
End-to-end prior-art search for one invention.

Pipeline:
1. Query context  - title + description + answered follow-ups
2. Keywords       - frequency ranked, LLM-enhanced when too sparse
3. Sources        - USPTO (PatentsView) + Lens.org, queried concurrently
4. Ranking        - 0.6 semantic + 0.4 keyword overlap
5. Analysis       - overlap/difference claims for the persisted top results
6. Persistence    - replace stored results for the session

License: MIT
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from priorart.analysis import PriorArtAnalyst, annotate_claims, fallback_keywords
from priorart.config import config, RankingConfig
from priorart.embeddings import OpenAIEmbedder
from priorart.keywords import KeywordExtractor
from priorart.models import CandidateRecord, QueryContext, SearchRequest, SearchResponse
from priorart.ranker import Embedder, PriorArtRanker
from priorart.sources import PatentSource, dedupe_candidates, default_sources, search_all
from priorart.storage import JsonResultStore, ResultStore

logger = logging.getLogger(__name__)

KEYWORDS_REPORTED = 5


class PriorArtSearchAgent:
    """
    Multi-source prior-art search with blended ranking.

    Collaborators default to the configured OpenAI/PatentsView/Lens clients
    and the JSON result store; pass your own to override any of them.
    """

    def __init__(
        self,
        embedder: Optional[Embedder] = None,
        sources: Optional[Sequence[PatentSource]] = None,
        store: Optional[ResultStore] = None,
        analyst: Optional[PriorArtAnalyst] = None,
        ranking_config: RankingConfig = None,
        use_openai: bool = True,
    ):
        self.config = ranking_config or config.ranking

        if use_openai and config.openai.api_key:
            embedder = embedder or OpenAIEmbedder()
            analyst = analyst or PriorArtAnalyst()
        elif use_openai and embedder is None:
            logger.warning("OPENAI_API_KEY not set. Semantic scoring disabled.")

        self.embedder = embedder
        self.analyst = analyst
        self.sources = list(sources) if sources is not None else default_sources()
        self.store = store if store is not None else JsonResultStore()
        self.ranker = PriorArtRanker(embedder=self.embedder, ranking_config=self.config)

    # =========================================================================
    # Keywords
    # =========================================================================

    async def extract_keywords(self, context: QueryContext) -> List[str]:
        """Keywords used to query the patent sources."""
        keywords = KeywordExtractor.extract(context.text, max_keywords=self.config.query_keyword_limit)
        logger.info(f"Basic keywords: {keywords[:KEYWORDS_REPORTED]}")

        if self.analyst is not None:
            keywords = await self.analyst.enhance_keywords(context.text, keywords)

        if not keywords:
            keywords = fallback_keywords(context.text)

        return keywords

    # =========================================================================
    # Main Pipeline
    # =========================================================================

    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Run a prior-art search.

        Empty context yields an empty response without any external call.
        Raises PersistenceError when ranked results cannot be stored.
        """
        context = request.to_context()

        if context.is_empty:
            logger.warning("No search context provided; returning empty result set")
            return SearchResponse(session_id=request.session_id)

        logger.info(f"Starting multi-source patent search (context length: {len(context.text)})")

        keywords = await self.extract_keywords(context)

        candidates = await search_all(self.sources, keywords, context.text)
        unique = dedupe_candidates(candidates)
        if len(unique) < len(candidates):
            logger.info(f"Removed {len(candidates) - len(unique)} duplicate candidates")

        ranked = await self.ranker.rank(context, unique)
        top = self.ranker.top(ranked)

        if self.config.enable_overlap_analysis and top:
            await annotate_claims(
                context.text, top, analyst=self.analyst, threshold=self.config.analysis_threshold
            )

        if request.session_id:
            rows = [r.to_dict() for r in top]
            await asyncio.to_thread(self.store.replace_results, request.session_id, rows)

        logger.info(
            f"Search complete: {len(ranked)} results, "
            f"top score: {top[0].similarity_score if top else 0:.4f}"
        )

        return SearchResponse(
            session_id=request.session_id,
            results=[r.to_dict() for r in top],
            results_found=len(ranked),
            sources_used=[s.name for s in self.sources],
            keywords_used=keywords[:KEYWORDS_REPORTED],
        )

    async def search_text(self, query: str, session_id: Optional[str] = None) -> SearchResponse:
        """Convenience wrapper for a plain free-text query."""
        return await self.search(SearchRequest(query=query, session_id=session_id))

    async def rank_candidates(
        self, query: str, candidates: Sequence[CandidateRecord]
    ) -> List[CandidateRecord]:
        """Rank an already-fetched candidate list against a free-text query."""
        return self.ranker.top(await self.ranker.rank(QueryContext.build(query=query), candidates))
