"""FastAPI application factory for the BoardGate server."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from boardgate import __version__
from boardgate.config import BoardGateConfig
from boardgate.hub import BoardHub
from boardgate.session.models import EnforcementRecord
from boardgate.storage.db import get_db
from boardgate.storage.repos import EnforcementRepo

logger = logging.getLogger(__name__)

_FRONTEND_DIR = Path(__file__).parent / "frontend"


async def create_app(
    config: BoardGateConfig | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or BoardGateConfig.load()
    policy = config.resolve_policy()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # The audit db belongs to the serving loop, so it opens here
        if config.audit_enabled:
            app.state.db = await get_db(config.audit_db_path)
        try:
            yield
        finally:
            if app.state.audit_tasks:
                await asyncio.gather(*app.state.audit_tasks, return_exceptions=True)
            if app.state.db is not None:
                await app.state.db.close()
                app.state.db = None

    app = FastAPI(
        title="BoardGate",
        version=__version__,
        docs_url="/api/docs",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.db = None
    app.state.audit_tasks = set()

    def persist(record: EnforcementRecord) -> None:
        if app.state.db is None:
            return
        repo = EnforcementRepo(app.state.db)
        task = asyncio.get_running_loop().create_task(repo.create(record))
        app.state.audit_tasks.add(task)
        task.add_done_callback(app.state.audit_tasks.discard)

    app.state.hub = BoardHub(policy=policy, on_enforcement=persist)
    logger.info("Board policy '%s' loaded", policy.name)

    # Register API routers
    from boardgate.web.api.live import router as live_router
    from boardgate.web.api.status import router as status_router

    app.include_router(status_router, prefix="/api")
    app.include_router(live_router)

    # Serve frontend static files
    if _FRONTEND_DIR.is_dir():
        app.mount(
            "/",
            StaticFiles(directory=str(_FRONTEND_DIR), html=True),
            name="frontend",
        )

    return app
