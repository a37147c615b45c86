"""Admin service layer."""

import logging
from typing import List, Optional

from digitalhub.core.errors import NotFound
from digitalhub.models.catalog import Product
from digitalhub.routers.catalog.products import product_to_response
from digitalhub.routers.catalog.schemas import ProductResponse
from digitalhub.services.wallet_service import minor_to_major
from digitalhub.services.withdrawal_service import withdrawal_to_dict

from . import repository as admin_repository
from .schemas import (
    AdminStatsResponse,
    AdminWithdrawalResponse,
    ProductCreateRequest,
    ProductUpdateRequest,
)

logger = logging.getLogger(__name__)


async def get_stats(db) -> AdminStatsResponse:
    sales_count, revenue_minor, commissions_minor = await admin_repository.sales_totals(db)
    pending_count, pending_minor = await admin_repository.pending_withdrawal_totals(db)
    return AdminStatsResponse(
        total_users=await admin_repository.count_users(db),
        total_products=await admin_repository.count_products(db),
        total_sales=sales_count,
        total_revenue_minor=revenue_minor,
        total_revenue_ngn=minor_to_major(revenue_minor),
        total_commissions_minor=commissions_minor,
        total_commissions_ngn=minor_to_major(commissions_minor),
        pending_withdrawals=pending_count,
        pending_withdrawals_minor=pending_minor,
    )


async def list_withdrawals(
    db, *, status_filter: Optional[str], limit: int, offset: int
) -> List[AdminWithdrawalResponse]:
    rows = await admin_repository.list_withdrawals_with_profiles(
        db, status_filter=status_filter, limit=limit, offset=offset
    )
    withdrawals = []
    for withdrawal, profile in rows:
        data = withdrawal_to_dict(withdrawal)
        data.pop("processing_fee_ngn")
        withdrawals.append(
            AdminWithdrawalResponse(
                **data,
                email=profile.email if profile else None,
                full_name=profile.full_name if profile else None,
            )
        )
    return withdrawals


async def create_product(db, *, admin, request: ProductCreateRequest) -> ProductResponse:
    product = Product(**request.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info(f"Admin {admin.id} created product {product.id} ({product.title})")
    return product_to_response(product)


async def _require_product(db, product_id: int) -> Product:
    product = await admin_repository.get_product(db, product_id=product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


async def update_product(
    db, *, admin, product_id: int, request: ProductUpdateRequest
) -> ProductResponse:
    product = await _require_product(db, product_id)
    changes = request.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(product, field, value)
    await db.commit()
    await db.refresh(product)
    logger.info(f"Admin {admin.id} updated product {product.id}: {sorted(changes)}")
    return product_to_response(product)


async def toggle_product(db, *, admin, product_id: int) -> ProductResponse:
    product = await _require_product(db, product_id)
    product.is_active = not product.is_active
    await db.commit()
    await db.refresh(product)
    logger.info(f"Admin {admin.id} set product {product.id} active={product.is_active}")
    return product_to_response(product)
