from fastapi import APIRouter

from . import auth, profile, referrals

router = APIRouter()
router.include_router(auth.router)
router.include_router(profile.router)
router.include_router(referrals.router)
