from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from marketoracle.database import Base


class WeeklyPerformance(Base):
    __tablename__ = "weekly_performance"
    __table_args__ = (
        UniqueConstraint("competition_id", "provider_id", "week_number", name="uq_weekly_performance_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    competition_id: Mapped[int] = mapped_column(ForeignKey("competitions.id"), index=True)
    provider_id: Mapped[str] = mapped_column(String(64), index=True)
    week_number: Mapped[int] = mapped_column(Integer, index=True)
    week_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    week_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    picks_made: Mapped[int] = mapped_column(Integer, default=0)
    picks_won: Mapped[int] = mapped_column(Integer, default=0)
    picks_lost: Mapped[int] = mapped_column(Integer, default=0)
    picks_active: Mapped[int] = mapped_column(Integer, default=0)
    win_rate: Mapped[float] = mapped_column(Float, default=0.0)
    total_points: Mapped[int] = mapped_column(Integer, default=0)
    profit_loss: Mapped[float] = mapped_column(Float, default=0.0)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
