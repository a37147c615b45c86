from digitalhub.models.catalog import Product, SubscriptionPlan, UserSubscription
from digitalhub.models.ledger import (
    ReferralCommission,
    ReferralTracking,
    Sale,
    Wallet,
    WithdrawalRequest,
)
from digitalhub.models.user import Profile, User

__all__ = [
    "User",
    "Profile",
    "Product",
    "SubscriptionPlan",
    "UserSubscription",
    "Wallet",
    "Sale",
    "WithdrawalRequest",
    "ReferralCommission",
    "ReferralTracking",
]
