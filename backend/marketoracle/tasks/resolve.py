from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketoracle.config import settings
from marketoracle.database import AsyncSessionLocal
from marketoracle.models.pick import Pick
from marketoracle.repositories.picks import PickRepository, WeekKey
from marketoracle.services.lease_service import acquire_lease, lease_key, release_lease
from marketoracle.services.performance_service import compute_provider_summary, compute_weekly_summary, summary_to_dict
from marketoracle.services.price_resolver import PriceResolver
from marketoracle.services.ranking_service import rank_week
from marketoracle.services.resolution_service import PickResult, PickStatus, evaluate_pick
from marketoracle.utils.price_math import competition_week, week_bounds

logger = logging.getLogger(__name__)


@dataclass
class ResolutionSummary:
    started_at: str
    finished_at: str | None = None
    lease_key: str = ""
    lease_acquired: bool = False
    success: bool = True
    picks_total: int = 0
    picks_processed: int = 0
    picks_closed: int = 0
    prices_updated: int = 0
    won: int = 0
    lost: int = 0
    expired: int = 0
    still_active: int = 0
    providers_updated: list[str] = field(default_factory=list)
    weeks_ranked: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


async def refresh_provider_statistics(repo: PickRepository, provider_id: str, now: datetime) -> None:
    summary = compute_provider_summary(await repo.list_terminal_picks(provider_id))
    await repo.upsert_provider_statistics(provider_id, {**summary_to_dict(summary), "updated_at": now})


async def refresh_week(repo: PickRepository, competition_id: int, week_number: int, now: datetime) -> dict[str, int]:
    """Rebuild every provider's row for one competition week, then re-rank the week."""
    competition = await repo.get_competition(competition_id)
    week_start, week_end = week_bounds(competition.start_date, week_number) if competition else (None, None)

    by_provider: dict[str, list[Pick]] = defaultdict(list)
    for pick in await repo.list_week_picks(competition_id, week_number):
        by_provider[pick.provider_id].append(pick)
    summaries = {provider_id: compute_weekly_summary(picks) for provider_id, picks in by_provider.items()}

    for provider_id, summary in summaries.items():
        await repo.upsert_weekly_performance(
            WeekKey(competition_id=competition_id, provider_id=provider_id, week_number=week_number),
            {
                **summary_to_dict(summary),
                "week_start_date": week_start,
                "week_end_date": week_end,
                "updated_at": now,
            },
        )

    ranks = rank_week(await repo.list_weekly_performance(competition_id, week_number))
    await repo.set_weekly_ranks(competition_id, week_number, ranks)
    return ranks


async def _aggregate(
    repo: PickRepository,
    provider_ids: set[str],
    weeks: set[tuple[int, int]],
    summary: ResolutionSummary,
    now: datetime,
) -> None:
    for provider_id in sorted(provider_ids):
        try:
            await refresh_provider_statistics(repo, provider_id, now)
            summary.providers_updated.append(provider_id)
        except Exception as exc:
            await repo.session.rollback()
            logger.exception("provider statistics refresh failed: provider_id=%s", provider_id)
            summary.errors.append(f"Provider stats error {provider_id}: {exc}")

    for competition_id, week_number in sorted(weeks):
        try:
            await refresh_week(repo, competition_id, week_number, now)
            summary.weeks_ranked.append(f"{competition_id}/{week_number}")
        except Exception as exc:
            await repo.session.rollback()
            logger.exception("weekly performance refresh failed: competition_id=%s week=%s", competition_id, week_number)
            summary.errors.append(f"Weekly performance error {competition_id}/{week_number}: {exc}")


def _count_outcome(summary: ResolutionSummary, status: str) -> None:
    summary.picks_closed += 1
    if status == PickStatus.WON.value:
        summary.won += 1
    elif status == PickStatus.LOST.value:
        summary.lost += 1
    else:
        summary.expired += 1


async def resolve_open_picks(
    session: AsyncSession,
    resolver: PriceResolver,
    summary: ResolutionSummary,
    now: datetime,
) -> None:
    repo = PickRepository(session)
    picks = await repo.list_active_picks()
    # detached so a rollback after one failed write does not expire the rest
    session.expunge_all()
    summary.picks_total = len(picks)
    if not picks:
        logger.info("resolution run: no active picks")
        return

    lookup = await resolver.resolve((p.symbol, p.asset_class) for p in picks)
    # one entry per symbol, however many picks share it
    for symbol in lookup.missing:
        logger.warning("no price available this cycle: symbol=%s", symbol)
        summary.errors.append(f"Could not fetch price for {symbol}")

    touched_providers: set[str] = set()
    touched_weeks: set[tuple[int, int]] = set()
    for pick in picks:
        price = lookup.get(pick.symbol)
        if price is None:
            summary.still_active += 1
            continue
        summary.prices_updated += 1

        update = evaluate_pick(pick, price, now)
        if update is None:
            continue
        try:
            landed = await repo.update_pick(pick.id, update.to_fields())
        except Exception as exc:
            await session.rollback()
            logger.exception("pick update failed: pick_id=%s symbol=%s", pick.id, pick.symbol)
            summary.errors.append(f"Error updating pick {pick.id}: {exc}")
            summary.still_active += 1
            continue
        if not landed:
            logger.info("pick already closed elsewhere; skipping: pick_id=%s", pick.id)
            continue

        summary.picks_processed += 1
        touched_providers.add(pick.provider_id)
        if pick.competition_id is not None and pick.week_number is not None:
            touched_weeks.add((pick.competition_id, pick.week_number))
        if update.is_terminal:
            _count_outcome(summary, update.status)
        else:
            summary.still_active += 1

    await _aggregate(repo, touched_providers, touched_weeks, summary, now)


async def run_resolution_pipeline(
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    resolver: PriceResolver | None = None,
    now: datetime | None = None,
) -> dict:
    """Resolve every active pick once, then refresh the derived leaderboard rows.

    Only one run per competition week proceeds at a time; a caller that finds
    the lease held gets back an empty summary with lease_acquired set to False.
    Partial failures land in the summary's errors instead of raising.
    """
    now = now or datetime.now(UTC)
    summary = ResolutionSummary(started_at=now.isoformat())
    resolver = resolver or PriceResolver()

    async with session_factory() as session:
        competition = await PickRepository(session).get_active_competition()
        week_number = None
        if competition is not None and now.date() >= competition.start_date:
            week_number = competition_week(competition.start_date, now.date())
        key = lease_key(competition.id if competition else None, week_number)
        summary.lease_key = key

        owner = await acquire_lease(session, key, settings.resolution_lease_ttl_seconds)
        if owner is None:
            summary.finished_at = datetime.now(UTC).isoformat()
            return summary.to_dict()

        summary.lease_acquired = True
        try:
            await resolve_open_picks(session, resolver, summary, now)
        except Exception:
            # postgres refuses further statements until the failed transaction is rolled back
            await session.rollback()
            raise
        finally:
            await release_lease(session, key, owner)

    summary.success = summary.picks_processed > 0 or not summary.errors
    summary.finished_at = datetime.now(UTC).isoformat()
    logger.info(
        "resolution run complete: total=%s processed=%s closed=%s won=%s lost=%s expired=%s errors=%s",
        summary.picks_total,
        summary.picks_processed,
        summary.picks_closed,
        summary.won,
        summary.lost,
        summary.expired,
        len(summary.errors),
    )
    return summary.to_dict()


async def get_pending_status(session: AsyncSession) -> dict:
    rows = await PickRepository(session).list_pending_expiries()
    symbols = list(dict.fromkeys(symbol for symbol, _ in rows))
    return {
        "pending_count": len(rows),
        "next_expiration": rows[0][1].isoformat() if rows else None,
        "symbols": symbols,
    }


async def force_resolve_pick(
    session: AsyncSession,
    pick_id: int,
    resolver: PriceResolver | None = None,
    now: datetime | None = None,
) -> dict:
    """Price and evaluate a single active pick immediately."""
    now = now or datetime.now(UTC)
    repo = PickRepository(session)
    pick = await repo.get_pick(pick_id)
    if pick is None:
        return {"success": False, "error": "Pick not found"}
    if pick.status != PickStatus.ACTIVE.value:
        return {"success": False, "error": f"Pick already {pick.status}", "status": pick.status, "result": pick.result}

    resolver = resolver or PriceResolver()
    lookup = await resolver.resolve([(pick.symbol, pick.asset_class)])
    price = lookup.get(pick.symbol)
    if price is None:
        return {"success": False, "error": f"Could not fetch price for {pick.symbol.upper()}"}

    update = evaluate_pick(pick, price, now)
    provider_id, competition_id, week_number = pick.provider_id, pick.competition_id, pick.week_number
    if not await repo.update_pick(pick_id, update.to_fields()):
        return {"success": False, "error": "Pick closed by another run"}

    summary = ResolutionSummary(started_at=now.isoformat())
    weeks = {(competition_id, week_number)} if competition_id is not None and week_number is not None else set()
    await _aggregate(repo, {provider_id}, weeks, summary, now)
    return {
        "success": True,
        "status": update.status,
        "result": update.result,
        "points_earned": update.points_earned,
        "current_price": price,
        "closed": update.result != PickResult.IN_PROGRESS.value,
        "errors": summary.errors,
    }
