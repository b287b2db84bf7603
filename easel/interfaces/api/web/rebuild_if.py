"""Static site rebuild endpoints (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from easel.interfaces.api.auth import require_admin
from easel.interfaces.api.types.rebuild_types import RebuildResponse, RebuildStatusResponse
from easel.interfaces.api.web.dependencies import get_rebuild_orchestrator
from easel.services.infrastructure.rebuild_svc import RebuildOrchestrator

router = APIRouter(prefix="/admin/rebuild", tags=["Rebuild"], dependencies=[Depends(require_admin)])

# HTTP status per rejection reason
_REJECT_STATUS = {"in_progress": 409, "cooldown": 429, "disabled": 409}


@router.post("", response_model=RebuildResponse)
async def trigger_rebuild(orchestrator: RebuildOrchestrator = Depends(get_rebuild_orchestrator)):
    """
    Rebuild the static site and swap it live.

    Waits for the build to finish. Rejections (already running, cooldown,
    disabled) come back immediately with `reason` set; a failed build or a
    rolled-back swap returns 500 with the failure message.
    """
    result = await orchestrator.trigger()
    body = RebuildResponse.from_dto(result)
    if result.success:
        return body
    status = _REJECT_STATUS.get(result.rejected, 500) if result.rejected else 500
    return JSONResponse(status_code=status, content=body.model_dump())


@router.get("/status", response_model=RebuildStatusResponse)
async def rebuild_status(orchestrator: RebuildOrchestrator = Depends(get_rebuild_orchestrator)) -> RebuildStatusResponse:
    return RebuildStatusResponse.from_dto(orchestrator.status())
