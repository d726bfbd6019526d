from datetime import UTC, date, datetime
from types import SimpleNamespace

import pytest

from marketoracle.services.resolution_service import (
    EXPIRED_LOSS_POINTS,
    EXPIRED_WIN_POINTS,
    STOP_LOSS_POINTS,
    evaluate_pick,
    target_points,
)

NOW = datetime(2026, 3, 10, 21, 0, tzinfo=UTC)


def pick(**kwargs):
    base = {
        "id": 1,
        "direction": "UP",
        "confidence": 70,
        "entry_price": 100.0,
        "target_price": 110.0,
        "stop_loss": 95.0,
        "expiry_date": date(2026, 3, 20),
        "status": "active",
    }
    base.update(kwargs)
    return SimpleNamespace(**base)


def test_target_checked_before_stop_loss():
    update = evaluate_pick(pick(), 112.0, NOW)
    assert update.status == "won"
    assert update.result == "target_hit"
    assert update.closed_at == NOW


def test_target_wins_even_when_stop_would_also_match():
    # a malformed pick where both bounds sit on the same side of entry
    update = evaluate_pick(pick(target_price=105.0, stop_loss=108.0), 106.0, NOW)
    assert update.status == "won"


def test_target_points_scale_with_confidence():
    assert target_points(80) == 23
    assert target_points(55) == 20
    assert target_points(None) == 15
    assert evaluate_pick(pick(confidence=80), 110.0, NOW).points_earned == 23


def test_down_pick_targets_and_stops():
    down = dict(direction="DOWN", target_price=90.0, stop_loss=105.0)
    won = evaluate_pick(pick(**down), 89.5, NOW)
    lost = evaluate_pick(pick(**down), 105.0, NOW)
    assert (won.status, won.result) == ("won", "target_hit")
    assert (lost.status, lost.result, lost.points_earned) == ("lost", "stop_hit", STOP_LOSS_POINTS)


def test_up_stop_loss_hit():
    update = evaluate_pick(pick(), 95.0, NOW)
    assert update.status == "lost"
    assert update.points_earned == STOP_LOSS_POINTS
    assert update.profit_loss == pytest.approx(-5.0)


def test_expiry_in_predicted_direction_is_partial_win():
    update = evaluate_pick(pick(expiry_date=date(2026, 3, 9)), 103.0, NOW)
    assert update.status == "expired"
    assert update.result == "expired_win"
    assert update.points_earned == EXPIRED_WIN_POINTS


def test_expiry_against_direction_is_partial_loss():
    update = evaluate_pick(pick(direction="DOWN", target_price=90.0, stop_loss=105.0, expiry_date=date(2026, 3, 9)), 101.0, NOW)
    assert update.status == "expired"
    assert update.result == "expired_loss"
    assert update.points_earned == EXPIRED_LOSS_POINTS
    assert update.profit_loss == pytest.approx(-1.0)


def test_expiry_day_itself_is_still_active():
    update = evaluate_pick(pick(expiry_date=NOW.date()), 101.0, NOW)
    assert update.status == "active"
    assert update.closed_at is None


def test_active_pick_only_refreshes_prices():
    update = evaluate_pick(pick(), 102.0, NOW)
    assert update.status == "active"
    assert update.result == "in_progress"
    assert update.points_earned == 0
    assert update.current_price == 102.0
    assert update.price_change_pct == pytest.approx(2.0)
    assert update.price_change_amount == pytest.approx(2.0)


def test_price_change_is_raw_and_profit_is_directional():
    update = evaluate_pick(pick(direction="DOWN", target_price=80.0, stop_loss=120.0), 90.0, NOW)
    assert update.price_change_pct == pytest.approx(-10.0)
    assert update.profit_loss == pytest.approx(10.0)
    assert update.profit_loss_pct == pytest.approx(10.0)


def test_hold_never_hits_target_or_stop():
    hold = dict(direction="HOLD", target_price=101.0, stop_loss=99.0)
    assert evaluate_pick(pick(**hold), 150.0, NOW).status == "active"
    inside = evaluate_pick(pick(expiry_date=date(2026, 3, 1), **hold), 102.5, NOW)
    outside = evaluate_pick(pick(expiry_date=date(2026, 3, 1), **hold), 104.0, NOW)
    assert inside.result == "expired_win"
    assert outside.result == "expired_loss"
    assert inside.profit_loss == 0.0


def test_terminal_pick_is_left_alone():
    for status in ("won", "lost", "expired"):
        assert evaluate_pick(pick(status=status), 50.0, NOW) is None


def test_zero_entry_price_does_not_divide():
    update = evaluate_pick(pick(entry_price=0.0, target_price=10.0, stop_loss=-1.0), 5.0, NOW)
    assert update.price_change_pct == 0.0
    assert update.profit_loss_pct == 0.0
