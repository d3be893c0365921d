"""Create profiles, properties, property_images and likes tables

Revision ID: 20261018_000001
Revises: None
Create Date: 2026-10-18

Marketplace listings and the profiles that own and save them.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column(
            "role",
            sa.Enum("buyer", "seller", "both", name="user_role", create_constraint=True),
            nullable=False,
            server_default="buyer",
        ),
        sa.Column("expo_push_token", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_role", "profiles", ["role"])

    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("seller_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("property_type", sa.String(50), nullable=False, server_default="house"),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Numeric(precision=3, scale=1), nullable=False, server_default="0"),
        sa.Column("square_feet", sa.Integer(), nullable=True),
        sa.Column("lot_size", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("year_built", sa.Integer(), nullable=True),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "available", "requested", "sold", "withdrawn",
                name="property_status",
                create_constraint=True,
            ),
            nullable=False,
            server_default="available",
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["seller_id"],
            ["profiles.id"],
            name="fk_properties_seller_id",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("price > 0", name="ck_properties_price_positive"),
        sa.CheckConstraint("bedrooms >= 0", name="ck_properties_bedrooms_non_negative"),
        sa.CheckConstraint("bathrooms >= 0", name="ck_properties_bathrooms_non_negative"),
    )
    op.create_index("ix_properties_seller_id", "properties", ["seller_id"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_seller_status", "properties", ["seller_id", "status"])

    op.create_table(
        "property_images",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["properties.id"],
            name="fk_property_images_property_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_property_images_property_id", "property_images", ["property_id"])

    op.create_table(
        "likes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["profiles.id"],
            name="fk_likes_user_id",
            ondelete="CASCADE",
        ),
        # NO ACTION: SQL Server rejects a second cascade path to likes
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["properties.id"],
            name="fk_likes_property_id",
            ondelete="NO ACTION",
        ),
        sa.UniqueConstraint("user_id", "property_id", name="uq_likes_user_property"),
    )
    op.create_index("ix_likes_user_id", "likes", ["user_id"])
    op.create_index("ix_likes_property_id", "likes", ["property_id"])


def downgrade() -> None:
    op.drop_index("ix_likes_property_id", table_name="likes")
    op.drop_index("ix_likes_user_id", table_name="likes")
    op.drop_table("likes")
    op.drop_index("ix_property_images_property_id", table_name="property_images")
    op.drop_table("property_images")
    op.drop_index("ix_properties_seller_status", table_name="properties")
    op.drop_index("ix_properties_status", table_name="properties")
    op.drop_index("ix_properties_city", table_name="properties")
    op.drop_index("ix_properties_seller_id", table_name="properties")
    op.drop_table("properties")
    op.drop_index("ix_profiles_role", table_name="profiles")
    op.drop_table("profiles")
    sa.Enum(name="property_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
