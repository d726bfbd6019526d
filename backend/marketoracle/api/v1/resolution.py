from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketoracle.config import settings
from marketoracle.database import get_session
from marketoracle.schemas.resolution import ForceResolveResponse, PendingStatusResponse, ResolutionRunResponse
from marketoracle.tasks.resolve import force_resolve_pick, get_pending_status, run_resolution_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resolution", tags=["resolution"])


def require_cron_secret(
    authorization: str | None = Header(default=None),
    test: bool = Query(default=False),
) -> None:
    if test and settings.resolution_allow_test_trigger:
        logger.warning("resolution trigger accepted via test escape hatch")
        return
    if not settings.cron_secret:
        logger.error("CRON_SECRET is missing; refusing resolution trigger")
        raise HTTPException(status_code=503, detail="Resolution trigger is not configured")
    expected = f"Bearer {settings.cron_secret}"
    if authorization is None or not secrets.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/run", response_model=ResolutionRunResponse, dependencies=[Depends(require_cron_secret)])
async def run_resolution() -> dict:
    return await run_resolution_pipeline()


@router.get("/run", response_model=ResolutionRunResponse, dependencies=[Depends(require_cron_secret)])
async def run_resolution_get() -> dict:
    return await run_resolution_pipeline()


@router.get("/pending", response_model=PendingStatusResponse)
async def pending_status(session: AsyncSession = Depends(get_session)) -> dict:
    return await get_pending_status(session)


@router.post(
    "/picks/{pick_id}/resolve",
    response_model=ForceResolveResponse,
    dependencies=[Depends(require_cron_secret)],
)
async def resolve_single_pick(pick_id: int, session: AsyncSession = Depends(get_session)) -> dict:
    outcome = await force_resolve_pick(session, pick_id)
    if not outcome["success"] and outcome.get("error") == "Pick not found":
        raise HTTPException(status_code=404, detail="Pick not found")
    return outcome
