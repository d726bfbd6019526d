from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum

from marketoracle.models.pick import Pick
from marketoracle.utils.price_math import directional_profit, percent_change

TARGET_BASE_POINTS = 15
TARGET_CONFIDENCE_DIVISOR = 10
STOP_LOSS_POINTS = -8
EXPIRED_WIN_POINTS = 5
EXPIRED_LOSS_POINTS = -2
HOLD_BAND_PCT = 3.0


class PickStatus(str, Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"
    EXPIRED = "expired"


class PickResult(str, Enum):
    IN_PROGRESS = "in_progress"
    TARGET_HIT = "target_hit"
    STOP_HIT = "stop_hit"
    EXPIRED_WIN = "expired_win"
    EXPIRED_LOSS = "expired_loss"


TERMINAL_STATUSES = frozenset({PickStatus.WON.value, PickStatus.LOST.value, PickStatus.EXPIRED.value})
WIN_RESULTS = frozenset({PickResult.TARGET_HIT.value, PickResult.EXPIRED_WIN.value})
LOSS_RESULTS = frozenset({PickResult.STOP_HIT.value, PickResult.EXPIRED_LOSS.value})


@dataclass(slots=True)
class PickUpdate:
    current_price: float
    price_change_pct: float
    price_change_amount: float
    price_updated_at: datetime
    status: str
    result: str
    points_earned: int
    profit_loss: float
    profit_loss_pct: float
    closed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_fields(self) -> dict:
        return asdict(self)


def _target_hit(pick: Pick, price: float) -> bool:
    if pick.direction == "UP":
        return price >= pick.target_price
    if pick.direction == "DOWN":
        return price <= pick.target_price
    return False


def _stop_hit(pick: Pick, price: float) -> bool:
    if pick.direction == "UP":
        return price <= pick.stop_loss
    if pick.direction == "DOWN":
        return price >= pick.stop_loss
    return False


def _moved_as_predicted(pick: Pick, price: float) -> bool:
    if pick.direction == "UP":
        return price > pick.entry_price
    if pick.direction == "DOWN":
        return price < pick.entry_price
    return abs(percent_change(pick.entry_price, price)) <= HOLD_BAND_PCT


def target_points(confidence: int | None) -> int:
    return TARGET_BASE_POINTS + int(confidence or 0) // TARGET_CONFIDENCE_DIVISOR


def is_expired(pick: Pick, now: datetime) -> bool:
    return now.date() > pick.expiry_date


def evaluate_pick(pick: Pick, current_price: float, now: datetime | None = None) -> PickUpdate | None:
    """Decide the next state of an active pick at current_price.

    Conditions are checked in a fixed order and the first match wins: target,
    then stop-loss, then expiry. Returns None for a pick that is already
    terminal so repeated evaluation never touches it.
    """
    if pick.status != PickStatus.ACTIVE.value:
        return None

    now = now or datetime.now(UTC)
    profit = directional_profit(pick.direction, pick.entry_price, current_price)
    update = PickUpdate(
        current_price=current_price,
        price_change_pct=percent_change(pick.entry_price, current_price),
        price_change_amount=current_price - pick.entry_price,
        price_updated_at=now,
        status=PickStatus.ACTIVE.value,
        result=PickResult.IN_PROGRESS.value,
        points_earned=0,
        profit_loss=profit,
        profit_loss_pct=(profit / pick.entry_price * 100.0) if pick.entry_price else 0.0,
    )

    if _target_hit(pick, current_price):
        update.status = PickStatus.WON.value
        update.result = PickResult.TARGET_HIT.value
        update.points_earned = target_points(pick.confidence)
    elif _stop_hit(pick, current_price):
        update.status = PickStatus.LOST.value
        update.result = PickResult.STOP_HIT.value
        update.points_earned = STOP_LOSS_POINTS
    elif is_expired(pick, now):
        update.status = PickStatus.EXPIRED.value
        if _moved_as_predicted(pick, current_price):
            update.result = PickResult.EXPIRED_WIN.value
            update.points_earned = EXPIRED_WIN_POINTS
        else:
            update.result = PickResult.EXPIRED_LOSS.value
            update.points_earned = EXPIRED_LOSS_POINTS

    if update.is_terminal:
        update.closed_at = now
    return update
