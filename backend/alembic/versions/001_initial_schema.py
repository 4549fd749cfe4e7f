"""Initial schema — user_profiles, stores, coupons, user_coupons, transactions.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

Delete rules: user_coupons cascade from both user_profiles and coupons;
transactions restrict deletion of the user and the store they reference.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("mall_id", UUID(as_uuid=True), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("phone_number", "mall_id", name="uq_user_profiles_phone_number_mall_id"),
        sa.CheckConstraint("total_points >= 0", name="ck_user_profiles_total_points_non_negative"),
    )
    op.create_index("ix_user_profiles_mall_id", "user_profiles", ["mall_id"])
    op.create_index(
        "uq_user_profiles_phone_number_null_mall", "user_profiles", ["phone_number"],
        unique=True,
        postgresql_where=sa.text("mall_id IS NULL"),
        sqlite_where=sa.text("mall_id IS NULL"),
    )

    op.create_table(
        "stores",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("mall_id", UUID(as_uuid=True), nullable=True),
    )
    op.create_index("ix_stores_mall_id", "stores", ["mall_id"])

    op.create_table(
        "coupons",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("manager_id", UUID(as_uuid=True), nullable=True),
        sa.Column("type", sa.String(50), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("cost_point", sa.Integer, nullable=False, server_default="0"),
        sa.Column("mall_id", UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("cost_point >= 0", name="ck_coupons_cost_point_non_negative"),
    )
    op.create_index("ix_coupons_mall_id", "coupons", ["mall_id"])

    op.create_table(
        "user_coupons",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("serial_number", sa.String(8), nullable=False),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("user_profiles.id", ondelete="CASCADE",
                          name="fk_user_coupons_user_id_user_profiles"),
            nullable=False,
        ),
        sa.Column(
            "coupon_id", UUID(as_uuid=True),
            sa.ForeignKey("coupons.id", ondelete="CASCADE",
                          name="fk_user_coupons_coupon_id_coupons"),
            nullable=False,
        ),
        sa.Column("is_redeemed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("serial_number", name="uq_user_coupons_serial_number"),
    )
    op.create_index("ix_user_coupons_user_id", "user_coupons", ["user_id"])
    op.create_index("ix_user_coupons_coupon_id", "user_coupons", ["coupon_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("user_profiles.id", ondelete="RESTRICT",
                          name="fk_transactions_user_id_user_profiles"),
            nullable=False,
        ),
        sa.Column(
            "store_id", UUID(as_uuid=True),
            sa.ForeignKey("stores.id", ondelete="RESTRICT",
                          name="fk_transactions_store_id_stores"),
            nullable=False,
        ),
        sa.Column("receipt_id", sa.String(100), nullable=False),
        sa.Column("receipt_description", sa.Text, nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("points", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("receipt_id", name="uq_transactions_receipt_id"),
        sa.CheckConstraint("price >= 0", name="ck_transactions_price_non_negative"),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_store_id", "transactions", ["store_id"])


def downgrade() -> None:
    op.drop_table("transactions")
    op.drop_table("user_coupons")
    op.drop_table("coupons")
    op.drop_table("stores")
    op.drop_table("user_profiles")
