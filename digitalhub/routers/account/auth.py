"""Auth Router - email/password signup and signin."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.config import Settings
from digitalhub.db import get_db
from digitalhub.dependencies import get_settings

from .schemas import AuthResponse, SigninRequest, SignupRequest
from .service import signin as service_signin, signup as service_signup

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup", response_model=AuthResponse)
async def signup(
    request: SignupRequest,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account, its profile and an empty wallet.

    A referral code that belongs to an existing user links the new account
    to that referrer.
    """
    return await service_signup(db, settings=settings, request=request)


@router.post("/signin", response_model=AuthResponse)
async def signin(
    request: SigninRequest,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    return await service_signin(db, settings=settings, request=request)
