"""Wallet Router - User wallet balance."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_current_user
from digitalhub.models.user import User

from .schemas import WalletResponse
from .service import get_wallet_info as service_get_wallet_info

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get("", response_model=WalletResponse)
async def get_wallet_info(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Wallet totals for the current user.

    ``available`` is the balance minus withdrawals that are still pending or
    processing.
    """
    return await service_get_wallet_info(db, user=user)
