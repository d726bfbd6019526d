from datetime import date

from pydantic import BaseModel


class ResolutionRunResponse(BaseModel):
    started_at: str
    finished_at: str | None = None
    lease_key: str
    lease_acquired: bool
    success: bool
    picks_total: int
    picks_processed: int
    picks_closed: int
    prices_updated: int
    won: int
    lost: int
    expired: int
    still_active: int
    providers_updated: list[str]
    weeks_ranked: list[str]
    errors: list[str]


class PendingStatusResponse(BaseModel):
    pending_count: int
    next_expiration: date | None = None
    symbols: list[str]


class ForceResolveResponse(BaseModel):
    success: bool
    error: str | None = None
    status: str | None = None
    result: str | None = None
    points_earned: int | None = None
    current_price: float | None = None
    closed: bool | None = None
    errors: list[str] = []
