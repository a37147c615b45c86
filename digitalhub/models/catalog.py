"""
Catalog Models: products and subscription plans
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)

from digitalhub.db import Base, BigIntPK, utcnow


class Product(Base):
    __tablename__ = "products"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, default="ebooks", nullable=False, index=True)
    price_minor = Column(BigInteger, nullable=False)
    file_url = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    preview_url = Column(String, nullable=True)
    download_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    tags = Column(JSON, nullable=True)
    file_format = Column(String, nullable=True)
    file_size_mb = Column(Float, nullable=True)
    author_creator = Column(String, nullable=True)
    brand = Column(String, nullable=True)
    product_version = Column(String, nullable=True)
    licensing_info = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)
    price_minor = Column(BigInteger, nullable=False)
    duration_months = Column(Integer, default=1, nullable=False)
    commission_rate = Column(Numeric(3, 2), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    user_id = Column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id = Column(BigInteger, ForeignKey("subscription_plans.id"), nullable=False)
    status = Column(String, default="active", nullable=False)  # active, cancelled
    start_date = Column(DateTime, default=utcnow, nullable=False)
    end_date = Column(DateTime, nullable=False)
    payment_reference = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
