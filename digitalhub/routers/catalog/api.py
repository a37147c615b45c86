from fastapi import APIRouter

from . import products, subscriptions

router = APIRouter()
router.include_router(products.router)
router.include_router(subscriptions.router)
