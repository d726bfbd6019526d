"""Persistence for picks and their derived leaderboard rows.

Every read and write the resolution pipeline needs goes through
``PickRepository`` so the pipeline never builds queries itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from marketoracle.models.competition import Competition
from marketoracle.models.pick import Pick
from marketoracle.models.provider_statistics import ProviderStatistics
from marketoracle.models.weekly_performance import WeeklyPerformance
from marketoracle.services.resolution_service import TERMINAL_STATUSES, PickStatus


@dataclass(frozen=True, slots=True)
class WeekKey:
    competition_id: int
    provider_id: str
    week_number: int


class PickRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _insert(self, model):
        dialect = self.session.bind.dialect.name if self.session.bind is not None else "postgresql"
        return sqlite_insert(model) if dialect == "sqlite" else pg_insert(model)

    async def get_active_competition(self) -> Competition | None:
        return await self.session.scalar(
            select(Competition)
            .where(Competition.status == "active")
            .order_by(Competition.start_date.desc(), Competition.id.desc())
            .limit(1)
        )

    async def get_competition(self, competition_id: int) -> Competition | None:
        return await self.session.scalar(select(Competition).where(Competition.id == competition_id))

    async def get_pick(self, pick_id: int) -> Pick | None:
        return await self.session.scalar(select(Pick).where(Pick.id == pick_id).execution_options(populate_existing=True))

    async def list_active_picks(self, competition_id: int | None = None) -> list[Pick]:
        stmt = select(Pick).where(Pick.status == PickStatus.ACTIVE.value)
        if competition_id is not None:
            stmt = stmt.where(Pick.competition_id == competition_id)
        return list((await self.session.scalars(stmt.order_by(Pick.id).execution_options(populate_existing=True))).all())

    async def list_pending_expiries(self) -> list[tuple[str, date]]:
        rows = await self.session.execute(
            select(Pick.symbol, Pick.expiry_date)
            .where(Pick.status == PickStatus.ACTIVE.value)
            .order_by(Pick.expiry_date, Pick.id)
        )
        return [(symbol, expiry) for symbol, expiry in rows.all()]

    async def update_pick(self, pick_id: int, fields: dict) -> bool:
        """Write resolver output for one pick and commit.

        The write only lands while the row is still active, so a pick that
        another run already closed is left alone. Returns whether it landed.
        """
        result = await self.session.execute(
            update(Pick)
            .where(and_(Pick.id == pick_id, Pick.status == PickStatus.ACTIVE.value))
            .values(**fields)
        )
        await self.session.commit()
        return bool(result.rowcount)

    async def list_terminal_picks(self, provider_id: str) -> list[Pick]:
        return list(
            (
                await self.session.scalars(
                    select(Pick)
                    .where(and_(Pick.provider_id == provider_id, Pick.status.in_(TERMINAL_STATUSES)))
                    .order_by(Pick.closed_at, Pick.pick_date, Pick.id)
                    .execution_options(populate_existing=True)
                )
            ).all()
        )

    async def list_week_picks(self, competition_id: int, week_number: int) -> list[Pick]:
        return list(
            (
                await self.session.scalars(
                    select(Pick)
                    .where(and_(Pick.competition_id == competition_id, Pick.week_number == week_number))
                    .order_by(Pick.provider_id, Pick.id)
                    .execution_options(populate_existing=True)
                )
            ).all()
        )

    async def upsert_provider_statistics(self, provider_id: str, stats: dict) -> None:
        stmt = self._insert(ProviderStatistics).values(provider_id=provider_id, **stats)
        stmt = stmt.on_conflict_do_update(index_elements=["provider_id"], set_=stats)
        await self.session.execute(stmt)
        await self.session.commit()

    async def upsert_weekly_performance(self, key: WeekKey, stats: dict) -> None:
        stmt = self._insert(WeeklyPerformance).values(
            competition_id=key.competition_id,
            provider_id=key.provider_id,
            week_number=key.week_number,
            **stats,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["competition_id", "provider_id", "week_number"],
            set_=stats,
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def list_weekly_performance(self, competition_id: int, week_number: int) -> list[WeeklyPerformance]:
        return list(
            (
                await self.session.scalars(
                    select(WeeklyPerformance)
                    .where(
                        and_(
                            WeeklyPerformance.competition_id == competition_id,
                            WeeklyPerformance.week_number == week_number,
                        )
                    )
                    .order_by(WeeklyPerformance.provider_id)
                    .execution_options(populate_existing=True)
                )
            ).all()
        )

    async def set_weekly_ranks(self, competition_id: int, week_number: int, ranks: dict[str, int]) -> None:
        for provider_id, rank in ranks.items():
            await self.session.execute(
                update(WeeklyPerformance)
                .where(
                    and_(
                        WeeklyPerformance.competition_id == competition_id,
                        WeeklyPerformance.week_number == week_number,
                        WeeklyPerformance.provider_id == provider_id,
                    )
                )
                .values(rank=rank)
            )
        await self.session.commit()
