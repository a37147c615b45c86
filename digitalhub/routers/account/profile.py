"""Profile Router"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_current_user
from digitalhub.models.user import User

from .schemas import ProfileResponse, ProfileUpdateRequest
from .service import get_profile as service_get_profile
from .service import update_profile as service_update_profile

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service_get_profile(db, user=user)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update contact and payout bank details.

    The referral code, the referrer and the admin flag cannot be changed here.
    """
    return await service_update_profile(db, user=user, request=request)
