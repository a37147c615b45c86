"""Account service layer."""

import logging

from sqlalchemy.exc import IntegrityError

from digitalhub.core.errors import NotFound, ValidationFailed
from digitalhub.core.security import create_access_token, hash_password, verify_password
from digitalhub.models.ledger import ReferralTracking
from digitalhub.models.user import Profile, User
from digitalhub.services.referrals import get_unique_referral_code, resolve_referrer
from digitalhub.services.wallet_service import ensure_wallet, minor_to_major

from . import repository as account_repository
from .schemas import (
    AuthResponse,
    AuthUser,
    ProfileResponse,
    ProfileUpdateRequest,
    ReferralsResponse,
    ReferredUser,
    SigninRequest,
    SignupRequest,
)

logger = logging.getLogger(__name__)


def _auth_response(settings, user: User) -> AuthResponse:
    token = create_access_token(settings, user_id=user.id, email=user.email)
    return AuthResponse(token=token, user=AuthUser(id=user.id, email=user.email))


async def signup(db, *, settings, request: SignupRequest) -> AuthResponse:
    email = request.email.strip().lower()
    if await account_repository.get_user_by_email(db, email=email):
        raise ValidationFailed("User already exists")

    try:
        user = User(email=email, password_hash=hash_password(request.password))
        db.add(user)
        await db.flush()

        referred_by_code = (request.referralCode or "").strip().upper() or None
        referrer = await resolve_referrer(db, referred_by_code, exclude_user_id=user.id)

        profile = Profile(
            user_id=user.id,
            email=email,
            full_name=request.fullName,
            referral_code=await get_unique_referral_code(db),
            referred_by_code=referred_by_code,
            is_admin=settings.is_admin_email(email),
        )
        db.add(profile)

        if referrer is not None:
            db.add(ReferralTracking(referrer_id=referrer.user_id, referred_user_id=user.id))

        await ensure_wallet(db, user.id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationFailed("User already exists")

    logger.info(
        f"User {user.id} signed up (referred_by={referred_by_code}, admin={profile.is_admin})"
    )
    return _auth_response(settings, user)


async def signin(db, *, settings, request: SigninRequest) -> AuthResponse:
    email = request.email.strip().lower()
    user = await account_repository.get_user_by_email(db, email=email)
    if user is None or not verify_password(request.password, user.password_hash):
        raise ValidationFailed("Invalid credentials")
    return _auth_response(settings, user)


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        user_id=profile.user_id,
        email=profile.email,
        full_name=profile.full_name,
        phone=profile.phone,
        bank_name=profile.bank_name,
        account_number=profile.account_number,
        account_name=profile.account_name,
        bank_code=profile.bank_code,
        referral_code=profile.referral_code,
        referred_by_code=profile.referred_by_code,
        is_admin=bool(profile.is_admin),
        created_at=profile.created_at,
    )


async def _require_profile(db, user: User) -> Profile:
    profile = await account_repository.get_profile_by_user_id(db, user_id=user.id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


async def get_profile(db, *, user: User) -> ProfileResponse:
    return _profile_response(await _require_profile(db, user))


async def update_profile(db, *, user: User, request: ProfileUpdateRequest) -> ProfileResponse:
    profile = await _require_profile(db, user)
    changes = request.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(profile, field, value)
    await db.commit()
    await db.refresh(profile)
    logger.info(f"Profile of user {user.id} updated: {sorted(changes)}")
    return _profile_response(profile)


async def get_referral_overview(db, *, settings, user: User) -> ReferralsResponse:
    profile = await _require_profile(db, user)
    total_referrals = await account_repository.count_referrals(db, referrer_id=user.id)
    earnings_minor = await account_repository.sum_referral_earnings(db, referrer_id=user.id)
    rows = await account_repository.list_recent_referrals(db, referrer_id=user.id)

    recent = [
        ReferredUser(
            user_id=tracking.referred_user_id,
            full_name=referred.full_name if referred else None,
            email=referred.email if referred else None,
            joined_at=tracking.created_at,
        )
        for tracking, referred in rows
    ]
    return ReferralsResponse(
        referral_code=profile.referral_code,
        referral_link=f"{settings.app_base_url.rstrip('/')}/?ref={profile.referral_code}",
        total_referrals=total_referrals,
        total_earnings_minor=earnings_minor,
        total_earnings_ngn=minor_to_major(earnings_minor),
        recent_referrals=recent,
    )
