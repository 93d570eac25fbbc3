"""
Prior-Art Ranker - LLM Analysis
===============================
Optional GPT assists around the ranking core:

1. Keyword enhancement - when rule-based extraction finds too few terms
2. Overlap analysis - shared vs. distinguishing elements per prior patent

Neither step changes any score. Failures fall back to rule-based output.

License: MIT
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

import orjson
from openai import AsyncOpenAI
from pydantic import ValidationError

from priorart.config import config, OpenAIConfig
from priorart.exceptions import ConfigurationError
from priorart.models import CandidateRecord, KeywordSuggestion, OverlapAnalysis

logger = logging.getLogger(__name__)

MIN_RULE_KEYWORDS = 3

GENERIC_DIFFERENCES = [
    "Your invention may have novel implementation approach",
    "Specific technical implementation may differ",
    "Target use case differentiation possible",
]


# =============================================================================
# Rule-based Fallbacks
# =============================================================================

def generic_overlaps(patent_title: str, context: str) -> List[str]:
    title_words = patent_title.lower().split()
    context_words = set(context.lower().split())
    common = [w for w in title_words if len(w) > 4 and w in context_words]

    if common:
        return [
            f"Both address {common[0]} technology",
            "Similar application domain",
        ]
    return ["General technology overlap"]


def generic_differences(patent_title: str, context: str) -> List[str]:
    return list(GENERIC_DIFFERENCES)


def fallback_keywords(context: str, limit: int = 5) -> List[str]:
    """Last resort when no keyword survives extraction."""
    return [w for w in context.split() if len(w) > 3][:limit]


# =============================================================================
# Analyst
# =============================================================================

class PriorArtAnalyst:
    """GPT helper for keyword enhancement and overlap analysis."""

    def __init__(self, openai_config: OpenAIConfig = None, client: AsyncOpenAI = None):
        self.config = openai_config or config.openai

        if client is not None:
            self.client = client
        else:
            if not self.config.api_key:
                raise ConfigurationError("OPENAI_API_KEY not set. Check .env file.")
            self.client = AsyncOpenAI(api_key=self.config.api_key, max_retries=0)

    async def _complete_json(self, system_prompt: str, user_prompt: str, temperature: float) -> dict:
        response = await self.client.chat.completions.create(
            model=self.config.analysis_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=temperature,
        )
        return orjson.loads(response.choices[0].message.content or "{}")

    async def enhance_keywords(self, context: str, keywords: Sequence[str]) -> List[str]:
        """
        Ask the LLM for technical search keywords.

        Only used when rule-based extraction produced fewer than
        MIN_RULE_KEYWORDS terms; otherwise `keywords` is returned as-is.
        """
        if len(keywords) >= MIN_RULE_KEYWORDS:
            return list(keywords)

        system_prompt = (
            "Extract 5-8 specific technical keywords for patent search. "
            'Respond with JSON: {"keywords": ["keyword1", "keyword2"]}. No explanation.'
        )

        try:
            data = await self._complete_json(system_prompt, context[:2000], temperature=0.2)
            suggestion = KeywordSuggestion(**data)
        except Exception as e:
            logger.warning(f"AI keyword extraction failed: {e}")
            return list(keywords)

        enhanced = [k for k in suggestion.keywords if isinstance(k, str) and len(k) > 2]
        if not enhanced:
            return list(keywords)

        logger.info(f"Enhanced keywords: {enhanced[:5]}")
        return enhanced

    async def analyze_overlap(self, context: str, candidate: CandidateRecord) -> OverlapAnalysis:
        """Compare the invention with one prior patent."""
        system_prompt = (
            'Analyze patent overlap. Respond with JSON: {"overlaps": ["..."], "differences": ["..."]}. '
            "2-4 items each. Be specific and technical."
        )
        user_prompt = (
            f"USER INVENTION:\n{context[:1500]}\n\n"
            f"EXISTING PATENT:\nTitle: {candidate.title}\nAbstract: {candidate.summary}"
        )

        try:
            data = await self._complete_json(system_prompt, user_prompt, temperature=0.3)
            return OverlapAnalysis(**data)
        except (ValidationError, orjson.JSONDecodeError) as e:
            logger.error(f"Failed to parse overlap analysis for {candidate.publication_number}: {e}")
        except Exception as e:
            logger.warning(f"Overlap analysis failed for {candidate.publication_number}: {e}")
        return OverlapAnalysis()


async def annotate_claims(
    context: str,
    candidates: Sequence[CandidateRecord],
    analyst: PriorArtAnalyst = None,
    threshold: float = 0.3,
) -> None:
    """
    Fill overlap/difference claims on each candidate in place.

    The LLM is consulted only for candidates scoring above `threshold`;
    everything else gets the rule-based statements.
    """
    async def _annotate(candidate: CandidateRecord) -> None:
        if analyst is not None and candidate.similarity_score > threshold:
            analysis = await analyst.analyze_overlap(context, candidate)
            candidate.overlap_claims = list(analysis.overlaps)
            candidate.difference_claims = list(analysis.differences)

        if not candidate.overlap_claims:
            candidate.overlap_claims = generic_overlaps(candidate.title, context)
        if not candidate.difference_claims:
            candidate.difference_claims = generic_differences(candidate.title, context)

    await asyncio.gather(*(_annotate(c) for c in candidates))
