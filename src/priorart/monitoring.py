"""
Prior-Art Ranker - Monitoring
=============================
Recurring prior-art watch: re-runs the search for an idea, records the
outcome, and raises an infringement alert on a close match.

License: MIT
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from priorart.config import config, MonitoringConfig
from priorart.models import InfringementAlert, MonitoringRecord, SearchRequest
from priorart.search_agent import PriorArtSearchAgent

logger = logging.getLogger(__name__)

LAST_RESULTS_KEPT = 5


class PriorArtMonitor:
    """Runs one monitoring pass for an idea or session."""

    def __init__(self, agent: PriorArtSearchAgent, monitoring_config: MonitoringConfig = None):
        self.agent = agent
        self.store = agent.store
        self.config = monitoring_config or config.monitoring

    def severity_for(self, score: float) -> Optional[str]:
        """Alert severity for a similarity score, None when below the alert threshold."""
        if score > self.config.critical_threshold:
            return "critical"
        if score > self.config.alert_threshold:
            return "high"
        return None

    async def run(
        self,
        search_query: str,
        idea_id: Optional[str] = None,
        session_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        if not search_query or not search_query.strip():
            raise ValueError("Search query is required")
        if not idea_id and not session_id:
            raise ValueError("idea_id or session_id is required")

        now = now or datetime.now()
        logger.info(f"Monitoring run (idea={idea_id}, session={session_id})")

        response = await self.agent.search(SearchRequest(query=search_query, session_id=session_id))
        results = response.results

        highest = max((r.get("similarity_score") or 0.0 for r in results), default=None)

        record = MonitoringRecord(
            search_query=search_query,
            idea_id=idea_id,
            session_id=session_id,
            results_found=len(results),
            # Every result counts as new; runs are not diffed
            new_results_count=len(results),
            highest_similarity_score=highest,
            last_search_at=now,
            next_search_at=now + timedelta(days=self.config.interval_days),
            is_active=True,
            last_results=[
                {
                    "title": r.get("title"),
                    "publication_number": r.get("publication_number"),
                    "similarity_score": r.get("similarity_score"),
                }
                for r in results[:LAST_RESULTS_KEPT]
            ],
        )

        existing = await asyncio.to_thread(self.store.find_monitoring, idea_id, session_id)
        await asyncio.to_thread(self.store.upsert_monitoring, record)
        logger.info("Updated existing monitoring record" if existing else "Created new monitoring record")

        alert = None
        severity = self.severity_for(highest) if highest is not None else None
        if severity is not None:
            top = next(r for r in results if r.get("similarity_score") == highest)
            alert = InfringementAlert(
                severity=severity,
                title=f"High similarity detected: {top.get('title') or 'Unknown patent'}",
                description=(
                    f"Found patent with {round(highest * 100)}% similarity to your invention. "
                    "Review recommended before filing."
                ),
                confidence_score=highest,
                idea_id=idea_id,
                session_id=session_id,
                source_url=top.get("url") or None,
                publication_number=top.get("publication_number"),
                detected_at=now,
            )
            await asyncio.to_thread(self.store.add_alert, alert)
            logger.info(f"Created {severity} infringement alert for {alert.publication_number}")

        return {
            "success": True,
            "results_found": len(results),
            "highest_similarity": highest,
            "next_search_at": record.next_search_at.isoformat(),
            "alert": alert.to_dict() if alert else None,
        }
