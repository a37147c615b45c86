"""
Async Dependencies for Authentication, settings and the payment gateway
"""
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.config import Settings
from digitalhub.core.errors import AuthError, Forbidden
from digitalhub.core.security import decode_access_token
from digitalhub.db import get_db
from digitalhub.models.user import Profile, User
from digitalhub.services.paystack_service import PaystackClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(settings: Settings = Depends(get_settings)) -> PaystackClient:
    return PaystackClient.from_settings(settings)


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extracts and validates the bearer JWT from the Authorization header.
    Returns the User the token was issued for.
    """
    auth_header = request.headers.get("authorization") or ""
    if not auth_header.lower().startswith("bearer "):
        raise AuthError("Authorization token missing.")
    token = auth_header.split(" ", 1)[1].strip()
    payload = decode_access_token(settings, token)

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthError("Invalid token")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthError("User not found")
    return user


async def get_admin_user(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Verify user is admin"""
    result = await db.execute(select(Profile.is_admin).where(Profile.user_id == user.id))
    if not result.scalar_one_or_none():
        raise Forbidden("Admin access required for this endpoint")
    return user
