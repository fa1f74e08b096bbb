"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)

def _vessel_counts() -> list[sa.Column]:
    return [
        sa.Column("caiac_single", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("caiac_dublu", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("placa_sup", sa.Integer(), nullable=False, server_default="0"),
    ]

def _coupon_snapshot() -> list[sa.Column]:
    return [
        sa.Column("coupon_code", sa.String(length=40), nullable=True),
        sa.Column("coupon_type", sa.String(length=12), nullable=True),
        sa.Column("coupon_value", sa.Float(), nullable=True),
        sa.Column("coupon_discount", sa.Float(), nullable=True),
        sa.Column("original_price", sa.Float(), nullable=True),
    ]

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=20), nullable=False, server_default=""),
        _ts("created_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "adventures",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("included_items", sa.JSON(), nullable=False),
        sa.Column("additional_info", sa.JSON(), nullable=False),
        sa.Column("short_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("meeting_point", sa.String(length=200), nullable=True),
        sa.Column("difficulty", sa.String(length=12), nullable=False, server_default="easy"),
        sa.Column("duration_value", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("duration_unit", sa.String(length=8), nullable=False, server_default="hours"),
        sa.Column("advance_payment_percentage", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("booking_cutoff_hour", sa.Integer(), nullable=True),
        sa.Column("caiac_single", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("caiac_dublu", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("placa_sup", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _ts("created_at"),
    )
    op.create_index("ix_adventures_slug", "adventures", ["slug"], unique=True)

    op.create_table(
        "adventure_dates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("adventure_id", sa.String(length=36), nullable=False),
        _ts("start_date"),
        _ts("end_date"),
    )
    op.create_index("ix_adventure_dates_adventure_id", "adventure_dates", ["adventure_id"], unique=False)
    op.create_index("ix_adventure_dates_start_date", "adventure_dates", ["start_date"], unique=False)

    op.create_table(
        "coupons",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=40), nullable=False),
        sa.Column("type", sa.String(length=12), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("min_purchase", sa.Float(), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("used_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("applies_to", sa.String(length=12), nullable=False, server_default="all"),
        sa.Column("applicable_adventures", sa.JSON(), nullable=False),
        _ts("start_date"),
        _ts("end_date", nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _ts("created_at"),
    )
    op.create_index("ix_coupons_code", "coupons", ["code"], unique=True)

    op.create_table(
        "payment_intents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("intent_id", sa.String(length=20), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("adventure_id", sa.String(length=36), nullable=False),
        sa.Column("adventure_title", sa.String(length=200), nullable=False),
        _ts("start_date"),
        _ts("end_date"),
        sa.Column("price", sa.Float(), nullable=False),
        *_vessel_counts(),
        sa.Column("advance_payment_percentage", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("advance_payment_amount", sa.Integer(), nullable=False, server_default="0"),
        *_coupon_snapshot(),
        sa.Column("payment_status", sa.String(length=30), nullable=False, server_default="pending"),
        sa.Column("status_message", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("payment_url", sa.String(length=512), nullable=True),
        sa.Column("payment_attempt", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("transaction_details", sa.JSON(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("adventure_image", sa.String(length=512), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("meeting_point", sa.String(length=200), nullable=True),
        sa.Column("difficulty", sa.String(length=12), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        _ts("expires_at"),
        sa.Column("converted_to_booking_id", sa.String(length=36), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_payment_intents_intent_id", "payment_intents", ["intent_id"], unique=True)
    op.create_index("ix_payment_intents_user_id", "payment_intents", ["user_id"], unique=False)
    op.create_index("ix_payment_intents_adventure_id", "payment_intents", ["adventure_id"], unique=False)
    op.create_index("ix_payment_intents_payment_status", "payment_intents", ["payment_status"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("order_id", sa.String(length=24), nullable=False),
        sa.Column("adventure_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("adventure_title", sa.String(length=200), nullable=False),
        _ts("start_date"),
        _ts("end_date"),
        sa.Column("price", sa.Float(), nullable=False),
        *_vessel_counts(),
        sa.Column("advance_payment_percentage", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("advance_payment_amount", sa.Integer(), nullable=False, server_default="0"),
        *_coupon_snapshot(),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="awaiting confirmation"),
        sa.Column("status_message", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("transaction_details", sa.JSON(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("meeting_point", sa.String(length=200), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_bookings_order_id", "bookings", ["order_id"], unique=True)
    op.create_index("ix_bookings_adventure_id", "bookings", ["adventure_id"], unique=False)
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)

    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("order_id", sa.String(length=24), nullable=False),
        sa.Column("adventure_title", sa.String(length=200), nullable=False),
        sa.Column("products", sa.JSON(), nullable=False),
        sa.Column("total", sa.Float(), nullable=False, server_default="0"),
        sa.Column("advance_payment", sa.Float(), nullable=False, server_default="0"),
        sa.Column("remaining_payment", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="awaiting confirmation"),
        _ts("start_date", nullable=True),
        _ts("end_date", nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"], unique=False)
    op.create_index("ix_orders_order_id", "orders", ["order_id"], unique=True)

    op.create_table(
        "voucher_purchases",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("order_id", sa.String(length=20), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("voucher_amount", sa.Integer(), nullable=False),
        sa.Column("processing_fee", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="pending_payment"),
        sa.Column("status_message", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("generated_coupon_code", sa.String(length=40), nullable=True, unique=True),
        sa.Column("payment_url", sa.String(length=512), nullable=True),
        sa.Column("payment_attempt", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("transaction_details", sa.JSON(), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_voucher_purchases_order_id", "voucher_purchases", ["order_id"], unique=True)
    op.create_index("ix_voucher_purchases_user_id", "voucher_purchases", ["user_id"], unique=False)
    op.create_index("ix_voucher_purchases_status", "voucher_purchases", ["status"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("actor_user_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=40), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        _ts("created_at"),
    )
    op.create_index("ix_audit_logs_actor_user_id", "audit_logs", ["actor_user_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"], unique=False)
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"], unique=False)

def downgrade() -> None:
    for table in (
        "audit_logs", "voucher_purchases", "orders", "bookings",
        "payment_intents", "coupons", "adventure_dates", "adventures", "users",
    ):
        op.drop_table(table)
