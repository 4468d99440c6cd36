"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from credit_auction.infrastructure.database.base import Base
from credit_auction.modules.common.clock import utcnow


def generate_uuid() -> str:
    return str(uuid.uuid4())


class CreditWallet(Base):
    __tablename__ = "credit_wallets"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_credit_wallets_balance_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    broker_id = Column(String(64), unique=True, nullable=False, index=True)
    balance = Column(Integer, nullable=False, default=0)
    # bumped on every balance change; the transaction written with it carries the same value
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    transactions = relationship("CreditTransaction", back_populates="wallet", cascade="all, delete-orphan")


class CreditTransaction(Base):
    __tablename__ = "credit_transactions"
    __table_args__ = (
        UniqueConstraint("wallet_id", "sequence", name="uq_credit_transactions_wallet_sequence"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    wallet_id = Column(String(36), ForeignKey("credit_wallets.id"), nullable=False, index=True)
    broker_id = Column(String(64), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    type = Column(String(32), nullable=False)  # signup_bonus, purchase, debit, bid_debit, refund, admin_adjustment
    amount = Column(Integer, nullable=False)
    balance_after = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="completed")
    description = Column(String(255))
    reference = Column(String(80), index=True)
    idempotency_key = Column(String(128), unique=True)
    order_id = Column(String(100), index=True)
    payment_id = Column(String(100))
    pack_id = Column(String(36))
    amount_paid_inr = Column(Integer)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    wallet = relationship("CreditWallet", back_populates="transactions")


class Enquiry(Base):
    __tablename__ = "enquiries"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    owner_id = Column(String(64), index=True)
    status = Column(String(16), nullable=False, default="open")  # open, closed, cancelled
    bidding_closes_at = Column(DateTime(timezone=True))
    top_n = Column(Integer)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    bids = relationship("Bid", back_populates="enquiry")


class Bid(Base):
    __tablename__ = "bids"
    __table_args__ = (
        Index(
            "uq_bids_active_broker_enquiry",
            "broker_id",
            "enquiry_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
        CheckConstraint("credits_used > 0", name="ck_bids_credits_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    broker_id = Column(String(64), nullable=False, index=True)
    enquiry_id = Column(String(64), ForeignKey("enquiries.id"), nullable=False, index=True)
    credits_used = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="ACTIVE")  # ACTIVE, REFUNDED
    refunded_at = Column(DateTime(timezone=True))
    rank = Column(Integer)
    is_on_leaderboard = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    enquiry = relationship("Enquiry", back_populates="bids")


class CreditPrice(Base):
    __tablename__ = "credit_prices"

    action = Column(String(64), primary_key=True)
    price = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class CreditPack(Base):
    __tablename__ = "credit_packs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    credits = Column(Integer, nullable=False)
    price_inr = Column(Integer, nullable=False)
    description = Column(String(255))
    flag_text = Column(String(50))
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
