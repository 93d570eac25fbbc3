"""
Prior-Art Ranker - Data Models
==============================
Dataclasses for pipeline state and Pydantic models for the invocation boundary
and structured LLM outputs.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Candidate Record
# =============================================================================

@dataclass
class CandidateRecord:
    """One external patent search hit."""
    title: str
    publication_number: str
    summary: str
    url: str = ""
    source: str = ""
    patent_date: Optional[str] = None
    assignee: str = "Unknown"

    # Relevance scores
    similarity_score: float = 0.0  # Blended
    semantic_score: float = 0.0  # Embedding cosine
    keyword_score: float = 0.0  # Keyword overlap
    semantically_scored: bool = False

    overlap_claims: List[str] = field(default_factory=list)
    difference_claims: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Text used for keyword extraction and embedding."""
        return f"{self.title} {self.summary}"

    @property
    def dedupe_key(self) -> str:
        return (self.publication_number or self.title or "").strip().lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "publication_number": self.publication_number,
            "summary": self.summary,
            "url": self.url,
            "source": self.source,
            "patent_date": self.patent_date,
            "assignee": self.assignee,
            "similarity_score": self.similarity_score,
            "semantic_score": self.semantic_score,
            "keyword_score": self.keyword_score,
            "semantically_scored": self.semantically_scored,
            "overlap_claims": list(self.overlap_claims),
            "difference_claims": list(self.difference_claims),
        }


# =============================================================================
# Query Context
# =============================================================================

@dataclass(frozen=True)
class QueryContext:
    """
    Snapshot of the invention text a search is scored against.

    Built once per invocation; every candidate in a response is scored
    against the same snapshot.
    """
    text: str

    @classmethod
    def build(
        cls,
        query: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        questions: Optional[List["QAPair"]] = None,
    ) -> "QueryContext":
        parts = [query or "", title or "", description or ""]
        for qa in questions or []:
            # Unanswered follow-ups add nothing to the context
            if qa.answer and qa.answer.strip():
                parts.append(f"{qa.question} {qa.answer}")

        text = " ".join(p.strip() for p in parts if p and p.strip())
        return cls(text=text)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


# =============================================================================
# Invocation Payloads
# =============================================================================

class QAPair(BaseModel):
    """A follow-up question and the inventor's answer."""
    question: str = ""
    answer: Optional[str] = None


class SearchRequest(BaseModel):
    """Prior-art search invocation."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    query: Optional[str] = Field(default=None, description="Free-text invention query")
    idea_title: Optional[str] = Field(default=None, alias="ideaTitle")
    idea_description: Optional[str] = Field(default=None, alias="ideaDescription")
    questions: List[QAPair] = Field(default_factory=list)

    def to_context(self) -> QueryContext:
        return QueryContext.build(
            query=self.query,
            title=self.idea_title,
            description=self.idea_description,
            questions=self.questions,
        )


class MonitoringRequest(BaseModel):
    """Prior-art monitoring invocation."""
    model_config = ConfigDict(populate_by_name=True)

    search_query: Optional[str] = Field(default=None, alias="searchQuery")
    idea_id: Optional[str] = Field(default=None, alias="ideaId")
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class SearchResponse(BaseModel):
    """Prior-art search output."""
    success: bool = True
    session_id: Optional[str] = None
    results: List[Dict[str, Any]] = Field(default_factory=list)
    results_found: int = 0
    sources_used: List[str] = Field(default_factory=list)
    keywords_used: List[str] = Field(default_factory=list)


# =============================================================================
# Structured LLM Outputs
# =============================================================================

class KeywordSuggestion(BaseModel):
    """Technical search keywords proposed by the LLM."""
    keywords: List[str] = Field(default_factory=list, description="5-8 technical keywords")


class OverlapAnalysis(BaseModel):
    """Overlap/difference analysis between the invention and one prior patent."""
    overlaps: List[str] = Field(default_factory=list, description="Shared technical elements")
    differences: List[str] = Field(default_factory=list, description="Distinguishing elements")


# =============================================================================
# Monitoring
# =============================================================================

@dataclass
class MonitoringRecord:
    """Recurring prior-art watch on one idea or session."""
    search_query: str
    idea_id: Optional[str] = None
    session_id: Optional[str] = None
    results_found: int = 0
    new_results_count: int = 0
    highest_similarity_score: Optional[float] = None
    last_search_at: Optional[datetime] = None
    next_search_at: Optional[datetime] = None
    is_active: bool = True
    last_results: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def key(self) -> str:
        if self.idea_id:
            return f"idea-{self.idea_id}"
        if self.session_id:
            return f"session-{self.session_id}"
        raise ValueError("Monitoring record needs an idea_id or session_id")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search_query": self.search_query,
            "idea_id": self.idea_id,
            "session_id": self.session_id,
            "results_found": self.results_found,
            "new_results_count": self.new_results_count,
            "highest_similarity_score": self.highest_similarity_score,
            "last_search_at": self.last_search_at.isoformat() if self.last_search_at else None,
            "next_search_at": self.next_search_at.isoformat() if self.next_search_at else None,
            "is_active": self.is_active,
            "last_results": list(self.last_results),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitoringRecord":
        def _parse(value):
            return datetime.fromisoformat(value) if value else None

        return cls(
            search_query=data.get("search_query", ""),
            idea_id=data.get("idea_id"),
            session_id=data.get("session_id"),
            results_found=data.get("results_found", 0),
            new_results_count=data.get("new_results_count", 0),
            highest_similarity_score=data.get("highest_similarity_score"),
            last_search_at=_parse(data.get("last_search_at")),
            next_search_at=_parse(data.get("next_search_at")),
            is_active=data.get("is_active", True),
            last_results=data.get("last_results", []),
        )


@dataclass
class InfringementAlert:
    """Raised when monitoring finds a closely matching patent."""
    severity: str
    title: str
    description: str
    confidence_score: float
    idea_id: Optional[str] = None
    session_id: Optional[str] = None
    alert_type: str = "high_similarity"
    source_url: Optional[str] = None
    publication_number: Optional[str] = None
    detected_at: datetime = field(default_factory=datetime.now)
    is_read: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_type": self.alert_type,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "confidence_score": self.confidence_score,
            "idea_id": self.idea_id,
            "session_id": self.session_id,
            "source_url": self.source_url,
            "publication_number": self.publication_number,
            "detected_at": self.detected_at.isoformat(),
            "is_read": self.is_read,
        }
