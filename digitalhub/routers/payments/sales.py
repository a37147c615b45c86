"""Sales Router"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_current_user, get_gateway
from digitalhub.models.user import User
from digitalhub.services.paystack_service import PaystackClient

from .schemas import SaleCreateRequest, SaleResponse, SettlementResponse
from .service import list_sales as service_list_sales
from .service import record_sale as service_record_sale

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("", response_model=List[SaleResponse])
async def list_sales(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service_list_sales(db, user=user)


@router.post("", response_model=SettlementResponse)
async def record_sale(
    request: SaleCreateRequest,
    user: User = Depends(get_current_user),
    gateway: PaystackClient = Depends(get_gateway),
    db: AsyncSession = Depends(get_db),
):
    """
    Settle a Paystack payment for one of the caller's product links.

    The payment is verified with Paystack first. Reporting a reference that
    was already settled (by the webhook or an earlier call) returns
    ``status: duplicate`` and changes nothing.
    """
    return await service_record_sale(db, user=user, gateway=gateway, request=request)
