from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import and_, delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from marketoracle.models.resolution_lease import ResolutionLease

logger = logging.getLogger(__name__)


def lease_key(competition_id: int | None, week_number: int | None) -> str:
    if competition_id is None or week_number is None:
        return "resolution:global"
    return f"resolution:{competition_id}:{week_number}"


def _as_utc(value: datetime) -> datetime:
    # sqlite hands timestamps back without tzinfo
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


async def acquire_lease(session: AsyncSession, key: str, ttl_seconds: int) -> str | None:
    """Take the lease for key, or take over one whose holder let it expire.

    Returns the owner token on success and None while another live run holds it.
    """
    now = datetime.now(UTC)
    owner = uuid.uuid4().hex
    dialect = session.bind.dialect.name if session.bind is not None else "postgresql"
    insert_stmt = (sqlite_insert(ResolutionLease) if dialect == "sqlite" else pg_insert(ResolutionLease)).values(
        key=key,
        owner=owner,
        acquired_at=now,
        expires_at=now + timedelta(seconds=ttl_seconds),
    )
    stmt = insert_stmt.on_conflict_do_update(
        index_elements=["key"],
        set_={
            "owner": insert_stmt.excluded.owner,
            "acquired_at": insert_stmt.excluded.acquired_at,
            "expires_at": insert_stmt.excluded.expires_at,
        },
        where=ResolutionLease.expires_at < now,
    )
    await session.execute(stmt)
    await session.commit()

    holder = await session.scalar(select(ResolutionLease).where(ResolutionLease.key == key).execution_options(populate_existing=True))
    if holder is None or holder.owner != owner:
        if holder is not None:
            logger.info("resolution lease busy: key=%s expires_at=%s", key, _as_utc(holder.expires_at).isoformat())
        return None
    return owner


async def release_lease(session: AsyncSession, key: str, owner: str) -> None:
    await session.execute(
        delete(ResolutionLease).where(and_(ResolutionLease.key == key, ResolutionLease.owner == owner))
    )
    await session.commit()
