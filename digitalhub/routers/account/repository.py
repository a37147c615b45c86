"""Account repository layer."""

from sqlalchemy import desc, func, select


async def get_user_by_email(db, *, email: str):
    from digitalhub.models.user import User

    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_profile_by_user_id(db, *, user_id: int):
    from digitalhub.models.user import Profile

    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def count_referrals(db, *, referrer_id: int) -> int:
    from digitalhub.models.ledger import ReferralTracking

    stmt = select(func.count(ReferralTracking.id)).where(
        ReferralTracking.referrer_id == referrer_id
    )
    result = await db.execute(stmt)
    return int(result.scalar_one() or 0)


async def sum_referral_earnings(db, *, referrer_id: int) -> int:
    from digitalhub.models.ledger import ReferralCommission

    stmt = select(
        func.coalesce(func.sum(ReferralCommission.commission_amount_minor), 0)
    ).where(ReferralCommission.referrer_id == referrer_id)
    result = await db.execute(stmt)
    return int(result.scalar_one() or 0)


async def list_recent_referrals(db, *, referrer_id: int, limit: int = 10):
    from digitalhub.models.ledger import ReferralTracking
    from digitalhub.models.user import Profile

    stmt = (
        select(ReferralTracking, Profile)
        .outerjoin(Profile, Profile.user_id == ReferralTracking.referred_user_id)
        .where(ReferralTracking.referrer_id == referrer_id)
        .order_by(desc(ReferralTracking.created_at), desc(ReferralTracking.id))
        .limit(limit)
    )
    result = await db.execute(stmt)
    return result.all()
