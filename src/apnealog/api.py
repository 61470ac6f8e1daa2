"""Read-only HTTP API for dashboard statistics."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .aggregator import RECENT_SESSIONS_LIMIT, compute_summary
from .storage import RecordStore

logger = logging.getLogger("apnealog")


def create_app(store: RecordStore, recent_limit: int = RECENT_SESSIONS_LIMIT) -> FastAPI:
    app = FastAPI(title="apnealog")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    @app.get("/statistics")
    def statistics() -> Dict[str, Any]:
        try:
            sessions = store.get_all_sessions()
            dives = store.get_all_dives()
        except Exception:
            logger.exception("Failed to read sessions and dives")
            raise HTTPException(status_code=500, detail="Failed to load statistics")
        return compute_summary(sessions, dives, recent_limit).to_dict()

    return app


def run_server(
    store: RecordStore,
    host: str = "127.0.0.1",
    port: int = 8000,
    recent_limit: Optional[int] = None,
) -> None:
    import uvicorn

    limit = RECENT_SESSIONS_LIMIT if recent_limit is None else recent_limit
    app = create_app(store, limit)
    uvicorn.run(app, host=host, port=port)
