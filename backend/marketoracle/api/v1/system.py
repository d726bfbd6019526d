from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import APIRouter, Depends

from marketoracle.database import get_session
from marketoracle.models.pick import Pick

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health(session: AsyncSession = Depends(get_session)) -> dict[str, str | int | None]:
    active_count_stmt = select(func.count(Pick.id)).where(Pick.status == "active")
    last_price_stmt = select(func.max(Pick.price_updated_at))

    active_count = int((await session.scalar(active_count_stmt)) or 0)
    last_price_update = await session.scalar(last_price_stmt)

    return {
        "status": "ok",
        "active_picks": active_count,
        "last_price_update": last_price_update.isoformat() if last_price_update else None,
    }
