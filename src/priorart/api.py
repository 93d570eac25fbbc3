"""
Prior-Art Ranker - HTTP API
===========================
FastAPI routes for prior-art search and monitoring.

License: MIT
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from priorart.exceptions import PersistenceError
from priorart.models import MonitoringRequest, SearchRequest, SearchResponse
from priorart.monitoring import PriorArtMonitor
from priorart.search_agent import PriorArtSearchAgent

logger = logging.getLogger(__name__)


def create_app(agent: Optional[PriorArtSearchAgent] = None) -> FastAPI:
    """Build the API. The default agent is created on first use."""
    app = FastAPI(title="Prior-Art Ranker API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.state.agent = agent

    def get_agent() -> PriorArtSearchAgent:
        if app.state.agent is None:
            app.state.agent = PriorArtSearchAgent()
        return app.state.agent

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/search-prior-art", response_model=SearchResponse)
    async def search_prior_art(request: SearchRequest):
        try:
            return await get_agent().search(request)
        except PersistenceError as e:
            logger.error(f"Failed to store prior art results: {e}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    @app.post("/run-prior-art-monitoring")
    async def run_prior_art_monitoring(request: MonitoringRequest):
        monitor = PriorArtMonitor(get_agent())
        try:
            return await monitor.run(
                request.search_query or "",
                idea_id=request.idea_id,
                session_id=request.session_id,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PersistenceError as e:
            logger.error(f"Monitoring run could not be saved: {e}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return app


app = create_app()
