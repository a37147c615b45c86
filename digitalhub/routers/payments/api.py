from fastapi import APIRouter

from . import banks, paystack_webhook, sales, transfers, wallet, withdrawals

router = APIRouter()
router.include_router(wallet.router)
router.include_router(sales.router)
router.include_router(withdrawals.router)
router.include_router(paystack_webhook.router)
router.include_router(banks.router)
router.include_router(transfers.router)
