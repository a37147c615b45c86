"""Withdrawals Router - payout requests by the current user."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_current_user
from digitalhub.models.user import User

from .schemas import WithdrawalCreateRequest, WithdrawalResponse
from .service import create_withdrawal as service_create_withdrawal
from .service import list_withdrawals as service_list_withdrawals

router = APIRouter(prefix="/withdrawals", tags=["Withdrawals"])


@router.get("", response_model=List[WithdrawalResponse])
async def list_withdrawals(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service_list_withdrawals(db, user=user)


@router.post("", response_model=WithdrawalResponse)
async def create_withdrawal(
    request: WithdrawalCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a withdrawal to a Nigerian bank account.

    - Minimum NGN 1,000, flat NGN 50 processing fee
    - Bank details default to the profile's saved account
    - The wallet is only debited once the transfer succeeds
    """
    return await service_create_withdrawal(db, user=user, request=request)
