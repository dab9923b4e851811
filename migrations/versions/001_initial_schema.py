"""Fleet snapshot table.

Revision ID: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── fleet_snapshots ───────────────────────────────────────────────
    op.create_table(
        "fleet_snapshots",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("service_date", sa.String(10), nullable=False, unique=True),
        sa.Column("schema_version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("payload", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_snapshots_date", "fleet_snapshots", ["service_date"])


def downgrade() -> None:
    op.drop_index("idx_snapshots_date", table_name="fleet_snapshots")
    op.drop_table("fleet_snapshots")
