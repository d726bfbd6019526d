from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from marketoracle.models.pick import Pick
from marketoracle.services.resolution_service import LOSS_RESULTS, WIN_RESULTS, PickStatus


@dataclass
class ProviderSummary:
    total_picks: int
    wins: int
    losses: int
    win_rate: float
    total_profit_loss: float
    total_return_pct: float
    total_points: int
    current_streak: int
    best_win_streak: int
    worst_loss_streak: int


@dataclass
class WeeklySummary:
    picks_made: int
    picks_won: int
    picks_lost: int
    picks_active: int
    win_rate: float
    total_points: int
    profit_loss: float


@dataclass
class StreakSummary:
    current: int
    best_win: int
    worst_loss: int


def is_win(pick: Pick) -> bool:
    return pick.result in WIN_RESULTS


def is_loss(pick: Pick) -> bool:
    return pick.result in LOSS_RESULTS


def win_rate(wins: int, losses: int) -> float:
    decided = wins + losses
    return wins / decided if decided > 0 else 0.0


def chronological(picks: Iterable[Pick]) -> list[Pick]:
    return sorted(picks, key=lambda p: (p.closed_at or p.pick_date, p.pick_date, p.id))


def compute_streaks(outcomes: Iterable[bool]) -> StreakSummary:
    """Walk win/loss outcomes oldest first.

    ``[True, True, False, True, False, False, False]`` gives best_win=2,
    worst_loss=3 and current=-3.
    """
    win_run = loss_run = 0
    best_win = worst_loss = 0
    for won in outcomes:
        if won:
            win_run += 1
            loss_run = 0
            best_win = max(best_win, win_run)
        else:
            loss_run += 1
            win_run = 0
            worst_loss = max(worst_loss, loss_run)
    current = win_run if win_run else -loss_run
    return StreakSummary(current=current, best_win=best_win, worst_loss=worst_loss)


def compute_provider_summary(picks: Iterable[Pick]) -> ProviderSummary:
    """Rebuild a provider's lifetime numbers from its terminal picks.

    Anything not yet decided (still active, or without a win/loss result) is
    left out of every counter, so the result only depends on closed history.
    """
    decided = [p for p in chronological(picks) if is_win(p) or is_loss(p)]
    wins = sum(1 for p in decided if is_win(p))
    losses = len(decided) - wins
    streaks = compute_streaks(is_win(p) for p in decided)
    return ProviderSummary(
        total_picks=len(decided),
        wins=wins,
        losses=losses,
        win_rate=win_rate(wins, losses),
        total_profit_loss=sum(p.profit_loss or 0.0 for p in decided),
        total_return_pct=sum(p.profit_loss_pct or 0.0 for p in decided),
        total_points=sum(p.points_earned or 0 for p in decided),
        current_streak=streaks.current,
        best_win_streak=streaks.best_win,
        worst_loss_streak=streaks.worst_loss,
    )


def compute_weekly_summary(picks: Iterable[Pick]) -> WeeklySummary:
    rows = list(picks)
    won = sum(1 for p in rows if is_win(p))
    lost = sum(1 for p in rows if is_loss(p))
    return WeeklySummary(
        picks_made=len(rows),
        picks_won=won,
        picks_lost=lost,
        picks_active=sum(1 for p in rows if p.status == PickStatus.ACTIVE.value),
        win_rate=win_rate(won, lost),
        total_points=sum(p.points_earned or 0 for p in rows),
        profit_loss=sum(p.profit_loss or 0.0 for p in rows),
    )


def summary_to_dict(summary: ProviderSummary | WeeklySummary) -> dict:
    return asdict(summary)
