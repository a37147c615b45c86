"""Admin repository layer."""

from typing import Optional

from sqlalchemy import desc, func, select


async def count_users(db) -> int:
    from digitalhub.models.user import User

    result = await db.execute(select(func.count(User.id)))
    return int(result.scalar_one() or 0)


async def count_products(db) -> int:
    from digitalhub.models.catalog import Product

    result = await db.execute(select(func.count(Product.id)))
    return int(result.scalar_one() or 0)


async def sales_totals(db):
    from digitalhub.models.ledger import Sale

    stmt = select(
        func.count(Sale.id),
        func.coalesce(func.sum(Sale.admin_amount_minor), 0),
        func.coalesce(func.sum(Sale.commission_amount_minor), 0),
    )
    result = await db.execute(stmt)
    count, admin_total, commission_total = result.one()
    return int(count or 0), int(admin_total or 0), int(commission_total or 0)


async def pending_withdrawal_totals(db):
    from digitalhub.models.ledger import WithdrawalRequest

    stmt = select(
        func.count(WithdrawalRequest.id),
        func.coalesce(func.sum(WithdrawalRequest.amount_minor), 0),
    ).where(WithdrawalRequest.status == "pending")
    result = await db.execute(stmt)
    count, amount = result.one()
    return int(count or 0), int(amount or 0)


async def list_withdrawals_with_profiles(
    db, *, status_filter: Optional[str], limit: int, offset: int
):
    from digitalhub.models.ledger import WithdrawalRequest
    from digitalhub.models.user import Profile

    stmt = select(WithdrawalRequest, Profile).outerjoin(
        Profile, Profile.user_id == WithdrawalRequest.user_id
    )
    if status_filter:
        stmt = stmt.where(WithdrawalRequest.status == status_filter)
    stmt = (
        stmt.order_by(desc(WithdrawalRequest.created_at), desc(WithdrawalRequest.id))
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(stmt)
    return result.all()


async def get_product(db, *, product_id: int):
    from digitalhub.models.catalog import Product

    return await db.get(Product, product_id)
