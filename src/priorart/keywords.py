"""
Prior-Art Ranker - Keyword Extraction
=====================================
Frequency-ranked keyword extraction and keyword-overlap scoring.

License: MIT
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import List, Optional


class KeywordExtractor:
    """
    Extract keywords from free text for patent source queries and overlap scoring.

    No stemming: "sensor" and "sensors" are distinct keywords.
    """

    MIN_LENGTH = 4

    # Common stop words to filter out, plus patent boilerplate
    STOP_WORDS = {
        'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of',
        'with', 'by', 'from', 'up', 'about', 'into', 'through', 'during', 'before',
        'after', 'above', 'below', 'between', 'under', 'again', 'further', 'then',
        'once', 'here', 'there', 'when', 'where', 'why', 'how', 'all', 'each',
        'both', 'few', 'more', 'most', 'other', 'some', 'such', 'no', 'nor', 'not',
        'only', 'own', 'same', 'so', 'than', 'too', 'very', 'can', 'will', 'just',
        'should', 'now', 'also', 'which', 'what', 'this', 'that', 'these', 'those',
        'using', 'system', 'method', 'device', 'apparatus', 'process', 'based',
    }

    _NON_WORD = re.compile(r'[^\w\s]')

    @classmethod
    def extract(cls, text: Optional[str], max_keywords: Optional[int] = None) -> List[str]:
        """
        Extract keywords from text.

        Args:
            text: Input text (may be empty)
            max_keywords: Optional cap on the number of keywords returned

        Returns:
            Distinct keywords, most frequent first; ties keep first-seen order
        """
        if not text:
            return []

        words = cls._NON_WORD.sub(' ', text.lower()).split()

        filtered = [w for w in words if len(w) >= cls.MIN_LENGTH and w not in cls.STOP_WORDS]

        # dicts keep insertion order, so ties stay in first-seen order
        word_freq = defaultdict(int)
        for word in filtered:
            word_freq[word] += 1

        scored = list(word_freq.items())
        scored.sort(key=lambda x: x[1], reverse=True)

        keywords = [word for word, _ in scored]
        if max_keywords is not None:
            keywords = keywords[:max_keywords]
        return keywords


def keyword_overlap_score(query_text: str, candidate_text: str, top_n: int = 10) -> float:
    """
    Fraction of the query's top keywords that also appear in the candidate text.

    Returns 0.0 when the query has no extractable keywords.
    """
    reference = set(KeywordExtractor.extract(query_text, max_keywords=top_n))
    if not reference:
        return 0.0

    candidate_keywords = set(KeywordExtractor.extract(candidate_text))
    return len(reference & candidate_keywords) / len(reference)
