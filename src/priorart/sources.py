"""
Prior-Art Ranker - Patent Source Adapters
=========================================
Keyword/text search against external patent databases.

Each adapter isolates its source's raw JSON schema and returns CandidateRecords.
Failures never propagate: a broken source contributes zero candidates.

License: MIT
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Sequence

import httpx

from priorart.config import config, SourceConfig
from priorart.exceptions import SourceError
from priorart.models import CandidateRecord
from priorart.retrying import external_retry

logger = logging.getLogger(__name__)


# =============================================================================
# Base Adapter
# =============================================================================

class PatentSource(ABC):
    """Common interface for an external patent database."""

    name: str = ""

    def __init__(
        self,
        source_config: SourceConfig = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = source_config or config.sources
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return True

    def build_query(self, keywords: Sequence[str], context: str) -> str:
        """Query string this source should receive for a search."""
        return " ".join(keywords[:5])

    async def search(self, query: str) -> List[CandidateRecord]:
        """
        Search the source.

        Returns an empty list for a blank query, a disabled source, or any failure.
        """
        if not query or not query.strip():
            return []
        if not self.enabled:
            logger.info(f"[{self.name}] Not configured, skipping")
            return []

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                async for attempt in external_retry(self.config.max_attempts):
                    with attempt:
                        data = await self._fetch(client, query)
            candidates = self._parse(data)
        except (httpx.HTTPError, SourceError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"[{self.name}] Search failed: {e}")
            return []

        for candidate in candidates:
            candidate.source = self.name

        logger.info(f"[{self.name}] Found {len(candidates)} results")
        return candidates

    @abstractmethod
    async def _fetch(self, client: httpx.AsyncClient, query: str) -> Dict[str, Any]:
        """Perform the HTTP call and return the decoded JSON body."""

    @abstractmethod
    def _parse(self, data: Dict[str, Any]) -> List[CandidateRecord]:
        """Turn the raw response into candidate records."""


# =============================================================================
# USPTO via PatentsView
# =============================================================================

class PatentsViewSource(PatentSource):
    """USPTO granted patents through the PatentsView search API."""

    name = "USPTO"

    FIELDS = [
        "patent_id", "patent_title", "patent_abstract", "patent_date",
        "assignees.assignee_organization",
    ]

    async def _fetch(self, client: httpx.AsyncClient, query: str) -> Dict[str, Any]:
        payload = {
            "q": {
                "_or": [
                    {"_text_any": {"patent_title": query}},
                    {"_text_any": {"patent_abstract": query}},
                ]
            },
            "f": self.FIELDS,
            "o": {"size": self.config.result_limit},
        }
        headers = {"Content-Type": "application/json"}
        if self.config.patentsview_api_key:
            headers["X-Api-Key"] = self.config.patentsview_api_key

        response = await client.post(self.config.patentsview_url, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()

    def _parse(self, data: Dict[str, Any]) -> List[CandidateRecord]:
        if not isinstance(data, dict):
            raise SourceError(self.name, "unexpected response shape")

        results = []
        for raw in data.get("patents") or []:
            patent_id = str(raw.get("patent_id") or raw.get("patent_number") or "").strip()
            if not patent_id:
                continue
            assignees = raw.get("assignees") or []
            assignee = (assignees[0].get("assignee_organization") if assignees else None) or "Unknown"

            results.append(CandidateRecord(
                title=raw.get("patent_title") or "Untitled Patent",
                publication_number=f"US{patent_id}",
                summary=raw.get("patent_abstract") or "No abstract available",
                url=f"https://patents.google.com/patent/US{patent_id}",
                patent_date=raw.get("patent_date"),
                assignee=assignee,
            ))
        return results[: self.config.result_limit]


# =============================================================================
# Lens.org
# =============================================================================

class LensSource(PatentSource):
    """Worldwide patents through the Lens.org patent search API."""

    name = "Lens.org"

    @property
    def enabled(self) -> bool:
        return bool(self.config.lens_api_key)

    def build_query(self, keywords: Sequence[str], context: str) -> str:
        return context[:500]

    async def _fetch(self, client: httpx.AsyncClient, query: str) -> Dict[str, Any]:
        payload = {
            "query": query,
            "size": self.config.result_limit,
            "sort": [{"date_published": "desc"}],
        }
        headers = {
            "Authorization": f"Bearer {self.config.lens_api_key}",
            "Content-Type": "application/json",
        }
        response = await client.post(self.config.lens_url, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()

    def _parse(self, data: Dict[str, Any]) -> List[CandidateRecord]:
        if not isinstance(data, dict):
            raise SourceError(self.name, "unexpected response shape")

        results = []
        for raw in data.get("data") or []:
            lens_id = raw.get("lens_id") or ""
            biblio = raw.get("biblio") or {}
            results.append(CandidateRecord(
                title=_first_text(raw.get("title") or biblio.get("invention_title")) or "Untitled Patent",
                publication_number=self._publication_number(raw) or lens_id or "Unknown",
                summary=_first_text(raw.get("abstract")) or "No abstract available",
                url=f"https://lens.org/lens/patent/{lens_id}",
                patent_date=raw.get("date_published"),
                assignee=self._assignee(raw, biblio),
            ))
        return results

    @staticmethod
    def _publication_number(raw: Dict[str, Any]) -> str:
        if raw.get("publication_number"):
            return raw["publication_number"]
        if raw.get("jurisdiction") and raw.get("doc_number"):
            return f"{raw['jurisdiction']}{raw['doc_number']}{raw.get('kind', '')}"
        return ""

    @staticmethod
    def _assignee(raw: Dict[str, Any], biblio: Dict[str, Any]) -> str:
        applicants = raw.get("applicants") or (biblio.get("parties") or {}).get("applicants") or []
        if not applicants:
            return "Unknown"
        name = applicants[0].get("extracted_name")
        if isinstance(name, dict):
            name = name.get("value")
        return name or "Unknown"


def _first_text(value: Any) -> str:
    """Lens returns localized fields as either a string or [{"text": ..., "lang": ...}]."""
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value:
        english = [v for v in value if isinstance(v, dict) and v.get("lang") == "en"]
        item = (english or value)[0]
        return item.get("text", "") if isinstance(item, dict) else str(item)
    return ""


# =============================================================================
# Multi-source Helpers
# =============================================================================

def default_sources(source_config: SourceConfig = None) -> List[PatentSource]:
    return [PatentsViewSource(source_config), LensSource(source_config)]


async def search_all(
    sources: Sequence[PatentSource],
    keywords: Sequence[str],
    context: str,
) -> List[CandidateRecord]:
    """Query every source concurrently; results keep source order."""
    batches = await asyncio.gather(
        *(source.search(source.build_query(keywords, context)) for source in sources),
        return_exceptions=True,
    )

    combined: List[CandidateRecord] = []
    for source, batch in zip(sources, batches):
        if isinstance(batch, BaseException):
            logger.warning(f"[{source.name}] Search raised {type(batch).__name__}: {batch}")
            continue
        combined.extend(batch)

    logger.info(
        "Source results: "
        + ", ".join(f"{s.name}={len(b) if isinstance(b, list) else 0}" for s, b in zip(sources, batches))
    )
    return combined


def dedupe_candidates(candidates: Sequence[CandidateRecord]) -> List[CandidateRecord]:
    """Drop later duplicates by publication number (title as fallback)."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = candidate.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique
