"""Transfers Router - admin approval or rejection of withdrawals."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_admin_user, get_gateway
from digitalhub.models.user import User
from digitalhub.services.paystack_service import PaystackClient

from .schemas import TransferDecisionRequest, TransferDecisionResponse
from .service import decide_transfer

router = APIRouter(tags=["Admin Withdrawals"])


@router.post("/paystack-transfer", response_model=TransferDecisionResponse)
async def paystack_transfer(
    request: TransferDecisionRequest,
    admin_user: User = Depends(get_admin_user),
    gateway: PaystackClient = Depends(get_gateway),
    db: AsyncSession = Depends(get_db),
):
    """
    Approve or reject a pending withdrawal.

    Approval creates a Paystack transfer recipient and starts a transfer of
    the net amount; the request moves to ``processing`` until the transfer
    webhook arrives. Rejection closes the request without touching the wallet.
    """
    return await decide_transfer(db, admin=admin_user, gateway=gateway, request=request)
