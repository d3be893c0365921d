"""Create requests and property_history tables

Revision ID: 20261018_000002
Revises: 20261018_000001
Create Date: 2026-10-18

Purchase requests with the one-pending-request-per-buyer partial unique
index, and the append-only property status history.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261018_000002"
down_revision: Union[str, None] = "20261018_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PENDING_ONLY = sa.text("status = 'pending'")


def upgrade() -> None:
    op.create_table(
        "requests",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("buyer_id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("seller_id", sa.String(36), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "accepted", "declined", "cancelled",
                name="request_status",
                create_constraint=True,
            ),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["buyer_id"],
            ["profiles.id"],
            name="fk_requests_buyer_id",
            ondelete="NO ACTION",
        ),
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["properties.id"],
            name="fk_requests_property_id",
            ondelete="NO ACTION",
        ),
        sa.ForeignKeyConstraint(
            ["seller_id"],
            ["profiles.id"],
            name="fk_requests_seller_id",
            ondelete="NO ACTION",
        ),
        sa.CheckConstraint("buyer_id <> seller_id", name="ck_requests_buyer_not_seller"),
    )
    op.create_index("ix_requests_property_id", "requests", ["property_id"])
    op.create_index("ix_requests_seller_id", "requests", ["seller_id"])
    op.create_index("ix_requests_status", "requests", ["status"])
    op.create_index("ix_requests_buyer_status", "requests", ["buyer_id", "status"])
    op.create_index(
        "uq_requests_buyer_pending",
        "requests",
        ["buyer_id"],
        unique=True,
        postgresql_where=PENDING_ONLY,
        sqlite_where=PENDING_ONLY,
        mssql_where=PENDING_ONLY,
    )

    op.create_table(
        "property_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["properties.id"],
            name="fk_property_history_property_id",
            ondelete="NO ACTION",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["profiles.id"],
            name="fk_property_history_user_id",
            ondelete="NO ACTION",
        ),
    )
    op.create_index("ix_property_history_property_id", "property_history", ["property_id"])
    op.create_index("ix_property_history_created_at", "property_history", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_property_history_created_at", table_name="property_history")
    op.drop_index("ix_property_history_property_id", table_name="property_history")
    op.drop_table("property_history")
    op.drop_index("uq_requests_buyer_pending", table_name="requests")
    op.drop_index("ix_requests_buyer_status", table_name="requests")
    op.drop_index("ix_requests_status", table_name="requests")
    op.drop_index("ix_requests_seller_id", table_name="requests")
    op.drop_index("ix_requests_property_id", table_name="requests")
    op.drop_table("requests")
    sa.Enum(name="request_status").drop(op.get_bind(), checkfirst=True)
