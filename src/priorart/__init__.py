"""
Prior-Art Ranker
================
Multi-source patent prior-art search with blended semantic + keyword ranking.

License: MIT
"""

from priorart.keywords import KeywordExtractor, keyword_overlap_score
from priorart.models import CandidateRecord, QueryContext
from priorart.scoring import blended_score, cosine_similarity

__all__ = [
    "CandidateRecord",
    "KeywordExtractor",
    "QueryContext",
    "blended_score",
    "cosine_similarity",
    "keyword_overlap_score",
]

__version__ = "1.0.0"
