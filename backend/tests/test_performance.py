from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from marketoracle.services.performance_service import (
    compute_provider_summary,
    compute_streaks,
    compute_weekly_summary,
    win_rate,
)

T0 = datetime(2026, 3, 2, 21, 0, tzinfo=UTC)
RESULT_FOR = {"W": ("won", "target_hit", 20, 4.0), "L": ("lost", "stop_hit", -8, -3.0)}


def closed_picks(outcomes: str) -> list[SimpleNamespace]:
    picks = []
    for i, code in enumerate(outcomes):
        status, result, points, pnl = RESULT_FOR[code]
        picks.append(
            SimpleNamespace(
                id=i + 1,
                status=status,
                result=result,
                points_earned=points,
                profit_loss=pnl,
                profit_loss_pct=pnl,
                pick_date=T0,
                closed_at=T0 + timedelta(days=i),
            )
        )
    return picks


def test_streaks_from_chronological_outcomes():
    streaks = compute_streaks([True, True, False, True, False, False, False])
    assert streaks.best_win == 2
    assert streaks.worst_loss == 3
    assert streaks.current == -3


def test_current_streak_positive_on_win_run():
    assert compute_streaks([False, True, True]).current == 2
    assert compute_streaks([]).current == 0


def test_provider_summary_walks_oldest_first_regardless_of_input_order():
    picks = closed_picks("WWLWLLL")
    summary = compute_provider_summary(list(reversed(picks)))
    assert summary.best_win_streak == 2
    assert summary.worst_loss_streak == 3
    assert summary.current_streak == -3
    assert summary.wins == 3
    assert summary.losses == 4
    assert summary.total_picks == 7
    assert summary.win_rate == pytest.approx(3 / 7)
    assert summary.total_points == 3 * 20 - 4 * 8
    assert summary.total_profit_loss == pytest.approx(0.0)


def test_expired_results_count_as_wins_and_losses():
    picks = closed_picks("WL")
    picks.append(
        SimpleNamespace(id=9, status="expired", result="expired_win", points_earned=5, profit_loss=1.0,
                        profit_loss_pct=1.0, pick_date=T0, closed_at=T0 + timedelta(days=5))
    )
    summary = compute_provider_summary(picks)
    assert (summary.wins, summary.losses) == (2, 1)
    assert summary.current_streak == 1


def test_active_picks_never_enter_the_denominator():
    picks = closed_picks("W")
    picks.append(
        SimpleNamespace(id=5, status="active", result="in_progress", points_earned=0, profit_loss=2.0,
                        profit_loss_pct=2.0, pick_date=T0, closed_at=None)
    )
    summary = compute_provider_summary(picks)
    assert summary.total_picks == 1
    assert summary.win_rate == 1.0
    assert summary.total_profit_loss == pytest.approx(4.0)


def test_win_rate_is_zero_not_nan_without_decided_picks():
    assert win_rate(0, 0) == 0.0
    assert compute_provider_summary([]).win_rate == 0.0


def test_weekly_summary_counts_every_status():
    picks = closed_picks("WLW")
    picks.append(
        SimpleNamespace(id=7, status="active", result="in_progress", points_earned=0, profit_loss=-1.5,
                        profit_loss_pct=-1.5, pick_date=T0, closed_at=None)
    )
    week = compute_weekly_summary(picks)
    assert week.picks_made == 4
    assert (week.picks_won, week.picks_lost, week.picks_active) == (2, 1, 1)
    assert week.win_rate == pytest.approx(2 / 3)
    assert week.total_points == 32
    assert week.profit_loss == pytest.approx(3.5)
