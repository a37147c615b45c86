"""
Admin Router - dashboard stats, withdrawal queue and product management
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_admin_user
from digitalhub.models.user import User
from digitalhub.routers.catalog.schemas import ProductResponse

from . import service as admin_service
from .schemas import (
    AdminStatsResponse,
    AdminWithdrawalResponse,
    ProductCreateRequest,
    ProductUpdateRequest,
)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(
    admin_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.get_stats(db)


@router.get("/withdrawals", response_model=List[AdminWithdrawalResponse])
async def list_withdrawals(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """List withdrawal requests, newest first, optionally filtered by status."""
    return await admin_service.list_withdrawals(
        db, status_filter=status, limit=limit, offset=offset
    )


@router.post("/products", response_model=ProductResponse)
async def create_product(
    request: ProductCreateRequest,
    admin_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.create_product(db, admin=admin_user, request=request)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    admin_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.update_product(
        db, admin=admin_user, product_id=product_id, request=request
    )


@router.post("/products/{product_id}/toggle", response_model=ProductResponse)
async def toggle_product(
    product_id: int,
    admin_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Flip a product between active and hidden."""
    return await admin_service.toggle_product(db, admin=admin_user, product_id=product_id)
