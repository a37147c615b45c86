"""
Commission Service - Turns confirmed payments into sales, wallet credits and
referral payouts.

Both settlements run in a single transaction that they commit themselves.
The payment reference is the idempotency key: a reference that was already
settled is acknowledged with status ``duplicate`` and changes nothing.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.errors import NotFound, ValidationFailed
from digitalhub.db import utcnow
from digitalhub.models.catalog import Product, SubscriptionPlan, UserSubscription
from digitalhub.models.ledger import ReferralCommission, Sale
from digitalhub.models.user import Profile, User
from digitalhub.services.referrals import resolve_referrer
from digitalhub.services.wallet_service import apply_rate, credit_wallet

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION_RATE = Decimal("0.20")
REFERRAL_SALE_RATE = Decimal("0.15")
REFERRAL_SUBSCRIPTION_RATE = Decimal("0.25")

STATUS_SETTLED = "settled"
STATUS_DUPLICATE = "duplicate"


@dataclass
class ProductSaleEvent:
    product_id: int
    seller_id: int
    buyer_email: Optional[str]
    amount_minor: int
    reference: str


@dataclass
class SubscriptionPurchaseEvent:
    user_id: int
    plan_id: int
    amount_minor: int
    reference: str
    buyer_email: Optional[str] = None


@dataclass
class SettlementResult:
    status: str
    sale_id: Optional[int] = None
    subscription_id: Optional[int] = None
    commission_minor: int = 0
    admin_minor: int = 0
    referral_minor: int = 0
    referrer_id: Optional[int] = None

    @property
    def duplicate(self) -> bool:
        return self.status == STATUS_DUPLICATE


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


async def get_commission_rate(db: AsyncSession, user_id: int) -> Decimal:
    """Commission rate of the user's active plan, or the free-tier default."""
    stmt = (
        select(SubscriptionPlan.commission_rate)
        .join(UserSubscription, UserSubscription.plan_id == SubscriptionPlan.id)
        .where(UserSubscription.user_id == user_id, UserSubscription.status == "active")
        .order_by(UserSubscription.created_at.desc(), UserSubscription.id.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    rate = result.scalar_one_or_none()
    if rate is None:
        return DEFAULT_COMMISSION_RATE
    return Decimal(str(rate))


async def _sale_exists(db: AsyncSession, reference: str) -> bool:
    result = await db.execute(select(Sale.id).where(Sale.transaction_id == reference))
    return result.first() is not None


async def _subscription_exists(db: AsyncSession, reference: str) -> bool:
    result = await db.execute(
        select(UserSubscription.id).where(UserSubscription.payment_reference == reference)
    )
    return result.first() is not None


def _is_duplicate_reference(exc: IntegrityError, *columns: str) -> bool:
    """True when ``exc`` is a unique violation on one of ``table.column``."""
    message = str(exc.orig).lower()
    for column in columns:
        table, name = column.split(".")
        # sqlite names the column, postgres the default "<table>_<column>_key" constraint
        if column in message or f"{table}_{name}_key" in message:
            return True
    return False


async def _referred_by_code(db: AsyncSession, user_id: int) -> Optional[str]:
    result = await db.execute(
        select(Profile.referred_by_code).where(Profile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def settle_product_sale(db: AsyncSession, event: ProductSaleEvent) -> SettlementResult:
    """
    Record a confirmed product purchase and pay the seller and their referrer.

    Raises:
        ValidationFailed: non-positive amount or missing reference
        NotFound: product missing or inactive, seller missing
    """
    if not event.reference:
        raise ValidationFailed("Payment reference is required")
    if event.amount_minor <= 0:
        raise ValidationFailed("Sale amount must be positive")

    if await _sale_exists(db, event.reference):
        logger.info(f"Sale {event.reference} already settled, skipping")
        return SettlementResult(status=STATUS_DUPLICATE)

    product = await db.get(Product, event.product_id)
    if product is None or not product.is_active:
        raise NotFound(f"Product {event.product_id} not found")

    seller = await db.get(User, event.seller_id)
    if seller is None:
        raise NotFound(f"Seller {event.seller_id} not found")

    rate = await get_commission_rate(db, event.seller_id)
    commission_minor = apply_rate(event.amount_minor, rate)
    admin_minor = event.amount_minor - commission_minor

    try:
        sale = Sale(
            product_id=product.id,
            seller_id=seller.id,
            buyer_email=event.buyer_email,
            sale_amount_minor=event.amount_minor,
            commission_amount_minor=commission_minor,
            admin_amount_minor=admin_minor,
            kind="product",
            status="completed",
            transaction_id=event.reference,
        )
        db.add(sale)
        await db.flush()

        await credit_wallet(db, seller.id, commission_minor)

        await db.execute(
            update(Product)
            .where(Product.id == product.id)
            .values(download_count=Product.download_count + 1)
        )

        referral_minor = 0
        referrer_id = None
        referrer = await resolve_referrer(
            db, await _referred_by_code(db, seller.id), exclude_user_id=seller.id
        )
        if referrer is not None:
            referrer_id = referrer.user_id
            referral_minor = apply_rate(commission_minor, REFERRAL_SALE_RATE)
            await credit_wallet(db, referrer_id, referral_minor)
            db.add(
                ReferralCommission(
                    referrer_id=referrer_id,
                    referred_user_id=seller.id,
                    commission_amount_minor=referral_minor,
                    commission_rate=REFERRAL_SALE_RATE,
                    source="product_sale",
                    transaction_id=event.reference,
                    status="completed",
                )
            )

        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not _is_duplicate_reference(e, "sales.transaction_id"):
            logger.warning(f"Sale {event.reference} failed on a constraint: {str(e)}")
            raise
        logger.info(f"Sale {event.reference} settled concurrently, treating as duplicate")
        return SettlementResult(status=STATUS_DUPLICATE)
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Settled sale {event.reference}: amount={event.amount_minor} rate={rate} "
        f"commission={commission_minor} admin={admin_minor} referral={referral_minor}"
    )
    return SettlementResult(
        status=STATUS_SETTLED,
        sale_id=sale.id,
        commission_minor=commission_minor,
        admin_minor=admin_minor,
        referral_minor=referral_minor,
        referrer_id=referrer_id,
    )


async def settle_subscription_purchase(
    db: AsyncSession,
    event: SubscriptionPurchaseEvent,
    *,
    record_referral_commission: bool = False,
) -> SettlementResult:
    """
    Activate a paid plan for the user and pay the referrer their share.

    Any active subscription is cancelled and flushed before the new row is
    inserted, all inside one transaction, so the user never holds two.

    Raises:
        ValidationFailed: missing reference, or amount below zero or the plan price
        NotFound: plan or user missing
    """
    if not event.reference:
        raise ValidationFailed("Payment reference is required")
    if event.amount_minor < 0:
        raise ValidationFailed("Subscription amount cannot be negative")

    if await _subscription_exists(db, event.reference) or await _sale_exists(
        db, event.reference
    ):
        logger.info(f"Subscription payment {event.reference} already settled, skipping")
        return SettlementResult(status=STATUS_DUPLICATE)

    plan = await db.get(SubscriptionPlan, event.plan_id)
    if plan is None:
        raise NotFound(f"Subscription plan {event.plan_id} not found")
    if event.amount_minor < (plan.price_minor or 0):
        raise ValidationFailed(
            f"Payment of {event.amount_minor} kobo is below the {plan.name} price "
            f"of {plan.price_minor} kobo"
        )

    user = await db.get(User, event.user_id)
    if user is None:
        raise NotFound(f"User {event.user_id} not found")

    now = utcnow()
    try:
        await db.execute(
            update(UserSubscription)
            .where(
                UserSubscription.user_id == user.id,
                UserSubscription.status == "active",
            )
            .values(status="cancelled")
        )
        await db.flush()

        subscription = UserSubscription(
            user_id=user.id,
            plan_id=plan.id,
            status="active",
            start_date=now,
            end_date=add_months(now, plan.duration_months or 0),
            payment_reference=event.reference,
        )
        db.add(subscription)
        await db.flush()

        sale_id = None
        if event.amount_minor > 0:
            sale = Sale(
                product_id=None,
                seller_id=user.id,
                buyer_email=event.buyer_email or user.email,
                sale_amount_minor=event.amount_minor,
                commission_amount_minor=0,
                admin_amount_minor=event.amount_minor,
                kind="subscription",
                status="completed",
                transaction_id=event.reference,
            )
            db.add(sale)
            await db.flush()
            sale_id = sale.id

        referral_minor = 0
        referrer_id = None
        referrer = await resolve_referrer(
            db, await _referred_by_code(db, user.id), exclude_user_id=user.id
        )
        if referrer is not None and event.amount_minor > 0:
            referrer_id = referrer.user_id
            referral_minor = apply_rate(event.amount_minor, REFERRAL_SUBSCRIPTION_RATE)
            await credit_wallet(db, referrer_id, referral_minor)
            if record_referral_commission:
                db.add(
                    ReferralCommission(
                        referrer_id=referrer_id,
                        referred_user_id=user.id,
                        commission_amount_minor=referral_minor,
                        commission_rate=REFERRAL_SUBSCRIPTION_RATE,
                        source="subscription",
                        transaction_id=event.reference,
                        status="completed",
                    )
                )

        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not _is_duplicate_reference(
            e, "user_subscriptions.payment_reference", "sales.transaction_id"
        ):
            logger.warning(
                f"Subscription payment {event.reference} failed on a constraint: {str(e)}"
            )
            raise
        logger.info(
            f"Subscription payment {event.reference} settled concurrently, treating as duplicate"
        )
        return SettlementResult(status=STATUS_DUPLICATE)
    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Activated plan {plan.name} for user {user.id} until {subscription.end_date.isoformat()} "
        f"(reference={event.reference}, referral={referral_minor})"
    )
    return SettlementResult(
        status=STATUS_SETTLED,
        sale_id=sale_id,
        subscription_id=subscription.id,
        admin_minor=event.amount_minor,
        referral_minor=referral_minor,
        referrer_id=referrer_id,
    )
