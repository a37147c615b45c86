"""
Money Models: wallets, sales, withdrawals and referral payouts

All amounts are kobo (minor units).
"""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)

from digitalhub.db import Base, BigIntPK, utcnow


class Wallet(Base):
    __tablename__ = "wallets"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    balance_minor = Column(BigInteger, default=0, nullable=False)
    total_earned_minor = Column(BigInteger, default=0, nullable=False)
    total_withdrawn_minor = Column(BigInteger, default=0, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Sale(Base):
    __tablename__ = "sales"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_id = Column(
        BigInteger, ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    seller_id = Column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    buyer_email = Column(String, nullable=True)
    sale_amount_minor = Column(BigInteger, nullable=False)
    commission_amount_minor = Column(BigInteger, nullable=False)
    admin_amount_minor = Column(BigInteger, nullable=False)
    kind = Column(String, default="product", nullable=False)  # product, subscription
    status = Column(String, default="completed", nullable=False)
    transaction_id = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount_minor = Column(BigInteger, nullable=False)
    processing_fee_minor = Column(BigInteger, nullable=False)
    net_amount_minor = Column(BigInteger, nullable=False)
    bank_name = Column(String, nullable=False)
    account_number = Column(String, nullable=False)
    account_name = Column(String, nullable=False)
    bank_code = Column(String, nullable=False)
    status = Column(
        String, default="pending", nullable=False, index=True
    )  # pending, processing, completed, failed, rejected
    reference = Column(String, unique=True, nullable=True)
    recipient_code = Column(String, nullable=True)
    admin_notes = Column(Text, nullable=True)
    admin_id = Column(BigInteger, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    processed_at = Column(DateTime, nullable=True)


class ReferralCommission(Base):
    __tablename__ = "referral_commissions"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    referrer_id = Column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    referred_user_id = Column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    commission_amount_minor = Column(BigInteger, nullable=False)
    commission_rate = Column(Numeric(3, 2), nullable=False)
    source = Column(String, nullable=False)  # product_sale, subscription
    transaction_id = Column(String, nullable=True)
    status = Column(String, default="completed", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class ReferralTracking(Base):
    __tablename__ = "referral_tracking"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    referrer_id = Column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    referred_user_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
