"""REST API for board status and the enforcement audit log."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from boardgate import __version__
from boardgate.storage.repos import EnforcementRepo

router = APIRouter(tags=["status"])

MAX_PAGE = 500


def _audit_disabled() -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Audit log disabled"})


@router.get("/status")
async def get_status(request: Request):
    hub = request.app.state.hub
    return {
        "version": __version__,
        **hub.lock_state.to_payload(),
        "connections": len(hub.registry),
        "segments": len(hub.strokes),
    }


@router.get("/enforcement")
async def list_enforcement(
    request: Request,
    limit: int = 50,
    offset: int = 0,
    identity: str | None = None,
):
    db = request.app.state.db
    if db is None:
        return _audit_disabled()
    repo = EnforcementRepo(db)
    if identity is not None:
        return await repo.list_by_identity(identity)
    limit = max(1, min(limit, MAX_PAGE))
    return await repo.list_recent(limit=limit, offset=max(0, offset))


@router.get("/enforcement/summary")
async def enforcement_summary(request: Request):
    """Event counts per kind (violation, disconnect, auth_block, ...)."""
    db = request.app.state.db
    if db is None:
        return _audit_disabled()
    return await EnforcementRepo(db).count_by_kind()
