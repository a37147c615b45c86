"""Catalog repository layer."""

from typing import Optional

from sqlalchemy import asc, desc, or_, select


async def list_active_products(
    db, *, category: Optional[str] = None, search: Optional[str] = None
):
    from digitalhub.models.catalog import Product

    stmt = select(Product).where(Product.is_active.is_(True))
    if category:
        stmt = stmt.where(Product.category == category)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(Product.title.ilike(pattern), Product.description.ilike(pattern))
        )
    stmt = stmt.order_by(desc(Product.created_at), desc(Product.id))
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_active_product(db, *, product_id: int):
    from digitalhub.models.catalog import Product

    stmt = select(Product).where(Product.id == product_id, Product.is_active.is_(True))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def list_plans(db):
    from digitalhub.models.catalog import SubscriptionPlan

    stmt = select(SubscriptionPlan).order_by(
        asc(SubscriptionPlan.price_minor), asc(SubscriptionPlan.id)
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_active_subscription_with_plan(db, *, user_id: int):
    from digitalhub.models.catalog import SubscriptionPlan, UserSubscription

    stmt = (
        select(UserSubscription, SubscriptionPlan)
        .join(SubscriptionPlan, SubscriptionPlan.id == UserSubscription.plan_id)
        .where(UserSubscription.user_id == user_id, UserSubscription.status == "active")
        .order_by(desc(UserSubscription.created_at), desc(UserSubscription.id))
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.first()
