"""resolution foundation: picks, competitions, leaderboards, leases

Revision ID: 0001_resolution
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_resolution"
down_revision = None
branch_labels = None
depends_on = None


def _has_table(bind, name: str) -> bool:
    inspector = sa.inspect(bind)
    return inspector.has_table(name)


def upgrade() -> None:
    bind = op.get_bind()

    if not _has_table(bind, "competitions"):
        op.create_table(
            "competitions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=128), nullable=False),
            sa.Column("start_date", sa.Date(), nullable=False),
            sa.Column("end_date", sa.Date(), nullable=True),
            sa.Column("status", sa.String(length=16), nullable=False, server_default="upcoming"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        )
        op.create_index("ix_competitions_status", "competitions", ["status"])

    if not _has_table(bind, "picks"):
        op.create_table(
            "picks",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("provider_id", sa.String(length=64), nullable=False),
            sa.Column("competition_id", sa.Integer(), sa.ForeignKey("competitions.id"), nullable=True),
            sa.Column("week_number", sa.Integer(), nullable=True),
            sa.Column("symbol", sa.String(length=32), nullable=False),
            sa.Column("asset_class", sa.String(length=16), nullable=False, server_default="equity"),
            sa.Column("direction", sa.String(length=8), nullable=False),
            sa.Column("confidence", sa.Integer(), nullable=False, server_default="50"),
            sa.Column("entry_price", sa.Float(), nullable=False),
            sa.Column("target_price", sa.Float(), nullable=False),
            sa.Column("stop_loss", sa.Float(), nullable=False),
            sa.Column("pick_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
            sa.Column("expiry_date", sa.Date(), nullable=False),
            sa.Column("current_price", sa.Float(), nullable=True),
            sa.Column("price_change_pct", sa.Float(), nullable=True),
            sa.Column("price_change_amount", sa.Float(), nullable=True),
            sa.Column("price_updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
            sa.Column("result", sa.String(length=16), nullable=True),
            sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("profit_loss", sa.Float(), nullable=True),
            sa.Column("profit_loss_pct", sa.Float(), nullable=True),
            sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        )
        for col in ("provider_id", "competition_id", "symbol", "pick_date", "expiry_date", "status"):
            op.create_index(f"ix_picks_{col}", "picks", [col])
        op.create_index("ix_picks_competition_week_provider", "picks", ["competition_id", "week_number", "provider_id"])

    if not _has_table(bind, "provider_statistics"):
        op.create_table(
            "provider_statistics",
            sa.Column("provider_id", sa.String(length=64), primary_key=True),
            sa.Column("total_picks", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("win_rate", sa.Float(), nullable=False, server_default="0"),
            sa.Column("total_profit_loss", sa.Float(), nullable=False, server_default="0"),
            sa.Column("total_return_pct", sa.Float(), nullable=False, server_default="0"),
            sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("best_win_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("worst_loss_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        )

    if not _has_table(bind, "weekly_performance"):
        op.create_table(
            "weekly_performance",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("competition_id", sa.Integer(), sa.ForeignKey("competitions.id"), nullable=False),
            sa.Column("provider_id", sa.String(length=64), nullable=False),
            sa.Column("week_number", sa.Integer(), nullable=False),
            sa.Column("week_start_date", sa.Date(), nullable=True),
            sa.Column("week_end_date", sa.Date(), nullable=True),
            sa.Column("picks_made", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("picks_won", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("picks_lost", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("picks_active", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("win_rate", sa.Float(), nullable=False, server_default="0"),
            sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("profit_loss", sa.Float(), nullable=False, server_default="0"),
            sa.Column("rank", sa.Integer(), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
            sa.UniqueConstraint("competition_id", "provider_id", "week_number", name="uq_weekly_performance_key"),
        )
        for col in ("competition_id", "provider_id", "week_number"):
            op.create_index(f"ix_weekly_performance_{col}", "weekly_performance", [col])

    if not _has_table(bind, "resolution_leases"):
        op.create_table(
            "resolution_leases",
            sa.Column("key", sa.String(length=128), primary_key=True),
            sa.Column("owner", sa.String(length=64), nullable=False),
            sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_resolution_leases_expires_at", "resolution_leases", ["expires_at"])


def downgrade() -> None:
    for table in ("resolution_leases", "weekly_performance", "provider_statistics", "picks", "competitions"):
        op.drop_table(table)
