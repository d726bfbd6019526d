from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from marketoracle.database import Base


class Pick(Base):
    __tablename__ = "picks"
    __table_args__ = (
        Index("ix_picks_competition_week_provider", "competition_id", "week_number", "provider_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    provider_id: Mapped[str] = mapped_column(String(64), index=True)
    competition_id: Mapped[int | None] = mapped_column(ForeignKey("competitions.id"), nullable=True, index=True)
    week_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # set once by the generation job
    symbol: Mapped[str] = mapped_column(String(32), index=True)
    asset_class: Mapped[str] = mapped_column(String(16), default="equity")
    direction: Mapped[str] = mapped_column(String(8))
    confidence: Mapped[int] = mapped_column(Integer, default=50)
    entry_price: Mapped[float] = mapped_column(Float)
    target_price: Mapped[float] = mapped_column(Float)
    stop_loss: Mapped[float] = mapped_column(Float)
    pick_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    expiry_date: Mapped[date] = mapped_column(Date, index=True)

    # written by the resolver
    current_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_change_pct: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_change_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="active", index=True)
    result: Mapped[str | None] = mapped_column(String(16), nullable=True)
    points_earned: Mapped[int] = mapped_column(Integer, default=0)
    profit_loss: Mapped[float | None] = mapped_column(Float, nullable=True)
    profit_loss_pct: Mapped[float | None] = mapped_column(Float, nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
