"""Referrals Router - referral code, link and earnings summary."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.config import Settings
from digitalhub.db import get_db
from digitalhub.dependencies import get_current_user, get_settings
from digitalhub.models.user import User

from .schemas import ReferralsResponse
from .service import get_referral_overview

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.get("", response_model=ReferralsResponse)
async def get_referrals(
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    return await get_referral_overview(db, settings=settings, user=user)
