from __future__ import annotations

from datetime import date, timedelta

DAYS_PER_WEEK = 7


def percent_change(entry_price: float, current_price: float) -> float:
    """Raw percent move from entry. 100 -> 112 = 12.0"""
    if entry_price == 0:
        return 0.0
    return (current_price - entry_price) / entry_price * 100.0


def directional_profit(direction: str, entry_price: float, current_price: float) -> float:
    """Profit per unit signed by the predicted direction. UP 100 -> 90 = -10.0, DOWN 100 -> 90 = 10.0"""
    if direction == "UP":
        return current_price - entry_price
    if direction == "DOWN":
        return entry_price - current_price
    return 0.0


def competition_week(start_date: date, on_date: date) -> int:
    """1-based competition week containing on_date. Start day is week 1."""
    if on_date < start_date:
        raise ValueError("on_date precedes the competition start")
    return (on_date - start_date).days // DAYS_PER_WEEK + 1


def week_bounds(start_date: date, week_number: int) -> tuple[date, date]:
    """First and last calendar day of a competition week."""
    if week_number < 1:
        raise ValueError("week_number must be >= 1")
    week_start = start_date + timedelta(days=(week_number - 1) * DAYS_PER_WEEK)
    return week_start, week_start + timedelta(days=DAYS_PER_WEEK - 1)
