"""Payments repository layer."""

from sqlalchemy import desc, select


async def list_sales_for_seller(db, *, seller_id: int, limit: int = 100):
    from digitalhub.models.catalog import Product
    from digitalhub.models.ledger import Sale

    stmt = (
        select(Sale, Product.title)
        .outerjoin(Product, Product.id == Sale.product_id)
        .where(Sale.seller_id == seller_id)
        .order_by(desc(Sale.created_at), desc(Sale.id))
        .limit(limit)
    )
    result = await db.execute(stmt)
    return result.all()


async def get_product(db, *, product_id: int):
    from digitalhub.models.catalog import Product

    return await db.get(Product, product_id)


async def get_profile(db, *, user_id: int):
    from digitalhub.models.user import Profile

    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()
