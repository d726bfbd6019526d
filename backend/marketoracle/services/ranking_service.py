from __future__ import annotations

from collections.abc import Iterable

from marketoracle.models.weekly_performance import WeeklyPerformance


def ranking_key(row: WeeklyPerformance) -> tuple:
    # points, then win rate, then profit, all descending; provider id breaks exact ties
    return (-(row.total_points or 0), -(row.win_rate or 0.0), -(row.profit_loss or 0.0), row.provider_id)


def rank_week(rows: Iterable[WeeklyPerformance]) -> dict[str, int]:
    """Map provider_id -> 1-based rank for one (competition, week)."""
    ordered = sorted(rows, key=ranking_key)
    return {row.provider_id: position for position, row in enumerate(ordered, start=1)}
