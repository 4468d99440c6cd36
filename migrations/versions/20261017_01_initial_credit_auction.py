"""create credit wallet, enquiry and bid tables

Revision ID: 3f9c1e7a2b64
Revises: 
Create Date: 2026-10-17 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1e7a2b64"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "credit_wallets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("broker_id", sa.String(length=64), nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("balance >= 0", name="ck_credit_wallets_balance_non_negative"),
    )
    op.create_index("ix_credit_wallets_broker_id", "credit_wallets", ["broker_id"], unique=True)

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("wallet_id", sa.String(length=36), sa.ForeignKey("credit_wallets.id"), nullable=False),
        sa.Column("broker_id", sa.String(length=64), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="completed"),
        sa.Column("description", sa.String(length=255)),
        sa.Column("reference", sa.String(length=80)),
        sa.Column("idempotency_key", sa.String(length=128), unique=True),
        sa.Column("order_id", sa.String(length=100)),
        sa.Column("payment_id", sa.String(length=100)),
        sa.Column("pack_id", sa.String(length=36)),
        sa.Column("amount_paid_inr", sa.Integer()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("wallet_id", "sequence", name="uq_credit_transactions_wallet_sequence"),
    )
    op.create_index("ix_credit_transactions_wallet_id", "credit_transactions", ["wallet_id"])
    op.create_index("ix_credit_transactions_broker_id", "credit_transactions", ["broker_id"])
    op.create_index("ix_credit_transactions_reference", "credit_transactions", ["reference"])
    op.create_index("ix_credit_transactions_order_id", "credit_transactions", ["order_id"])

    op.create_table(
        "enquiries",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("owner_id", sa.String(length=64)),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="open"),
        sa.Column("bidding_closes_at", sa.DateTime(timezone=True)),
        sa.Column("top_n", sa.Integer()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_enquiries_owner_id", "enquiries", ["owner_id"])

    op.create_table(
        "bids",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("broker_id", sa.String(length=64), nullable=False),
        sa.Column("enquiry_id", sa.String(length=64), sa.ForeignKey("enquiries.id"), nullable=False),
        sa.Column("credits_used", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
        sa.Column("refunded_at", sa.DateTime(timezone=True)),
        sa.Column("rank", sa.Integer()),
        sa.Column("is_on_leaderboard", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("credits_used > 0", name="ck_bids_credits_positive"),
    )
    op.create_index("ix_bids_broker_id", "bids", ["broker_id"])
    op.create_index("ix_bids_enquiry_id", "bids", ["enquiry_id"])
    op.create_index(
        "uq_bids_active_broker_enquiry",
        "bids",
        ["broker_id", "enquiry_id"],
        unique=True,
        sqlite_where=sa.text("status = 'ACTIVE'"),
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        "credit_prices",
        sa.Column("action", sa.String(length=64), primary_key=True),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "credit_packs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False),
        sa.Column("price_inr", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.Column("flag_text", sa.String(length=50)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    op.drop_table("credit_packs")
    op.drop_table("credit_prices")
    op.drop_index("uq_bids_active_broker_enquiry", table_name="bids")
    op.drop_index("ix_bids_enquiry_id", table_name="bids")
    op.drop_index("ix_bids_broker_id", table_name="bids")
    op.drop_table("bids")
    op.drop_index("ix_enquiries_owner_id", table_name="enquiries")
    op.drop_table("enquiries")
    op.drop_index("ix_credit_transactions_order_id", table_name="credit_transactions")
    op.drop_index("ix_credit_transactions_reference", table_name="credit_transactions")
    op.drop_index("ix_credit_transactions_broker_id", table_name="credit_transactions")
    op.drop_index("ix_credit_transactions_wallet_id", table_name="credit_transactions")
    op.drop_table("credit_transactions")
    op.drop_index("ix_credit_wallets_broker_id", table_name="credit_wallets")
    op.drop_table("credit_wallets")
