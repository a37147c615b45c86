import logging
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.errors import HubError
from digitalhub.models.user import Profile

logger = logging.getLogger(__name__)

REFERRAL_CODE_BYTES = 4


def generate_referral_code() -> str:
    """Return a random 8-character uppercase hex referral code."""
    return secrets.token_hex(REFERRAL_CODE_BYTES).upper()


async def get_unique_referral_code(db: AsyncSession, max_attempts: int = 10) -> str:
    """
    Return a referral code that is not yet in use.
    Raises HubError if no unique code can be generated after several attempts.
    """
    for _ in range(max_attempts):
        code = generate_referral_code()
        result = await db.execute(select(Profile.id).where(Profile.referral_code == code))
        if result.first() is None:
            return code

    raise HubError("Unable to generate a unique referral code. Please try again shortly.")


async def resolve_referrer(
    db: AsyncSession, referral_code: Optional[str], *, exclude_user_id: Optional[int] = None
) -> Optional[Profile]:
    """
    Find the profile owning ``referral_code``.

    Returns None for an empty or unknown code, and for a code that belongs to
    ``exclude_user_id`` so a user never earns from their own activity.
    """
    code = (referral_code or "").strip().upper()
    if not code:
        return None

    result = await db.execute(select(Profile).where(Profile.referral_code == code))
    referrer = result.scalar_one_or_none()
    if referrer is None:
        logger.info(f"Referral code {code} did not resolve to a profile")
        return None
    if exclude_user_id is not None and referrer.user_id == exclude_user_id:
        logger.warning(f"Ignoring self-referral for user {exclude_user_id}")
        return None
    return referrer
