"""Subscriptions Router - plan catalog and the caller's active plan."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import get_db
from digitalhub.dependencies import get_current_user
from digitalhub.models.user import User
from digitalhub.services.wallet_service import minor_to_major

from . import repository as catalog_repository
from .schemas import SubscriptionPlanResponse, UserSubscriptionResponse

router = APIRouter(tags=["Subscriptions"])


@router.get("/subscription-plans", response_model=List[SubscriptionPlanResponse])
async def list_subscription_plans(db: AsyncSession = Depends(get_db)):
    plans = await catalog_repository.list_plans(db)
    return [
        SubscriptionPlanResponse(
            id=plan.id,
            name=plan.name,
            price_minor=plan.price_minor,
            price_ngn=minor_to_major(plan.price_minor),
            duration_months=plan.duration_months,
            commission_rate=float(plan.commission_rate),
        )
        for plan in plans
    ]


@router.get("/user-subscription", response_model=Optional[UserSubscriptionResponse])
async def get_user_subscription(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Active subscription of the caller, or null on the free tier."""
    row = await catalog_repository.get_active_subscription_with_plan(db, user_id=user.id)
    if row is None:
        return None
    subscription, plan = row
    return UserSubscriptionResponse(
        id=subscription.id,
        plan_id=plan.id,
        plan_name=plan.name,
        commission_rate=float(plan.commission_rate),
        status=subscription.status,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        payment_reference=subscription.payment_reference,
    )
