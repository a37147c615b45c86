"""
Paystack Webhook Router - Handles Paystack webhook events
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.config import Settings
from digitalhub.core.errors import NotFound, ValidationFailed
from digitalhub.db import get_db
from digitalhub.dependencies import get_gateway, get_settings
from digitalhub.services.paystack_service import PaystackClient
from digitalhub.services.webhook_service import handle_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/paystack-webhook", tags=["Paystack Webhooks"])


@router.post("")
async def paystack_webhook(
    request: Request,
    paystack_signature: Optional[str] = Header(None, alias="x-paystack-signature"),
    settings: Settings = Depends(get_settings),
    gateway: PaystackClient = Depends(get_gateway),
    db: AsyncSession = Depends(get_db),
):
    """
    Handle Paystack webhook events.

    - charge.success (metadata.type product_purchase or subscription): settle the payment
    - transfer.success: complete the withdrawal and debit the wallet
    - transfer.failed / transfer.reversed: mark the withdrawal failed

    Every settlement is idempotent, so a 500 here is safe for Paystack to retry.
    Events that can never succeed (unknown product, plan or reference, bad
    metadata) are acknowledged so Paystack stops redelivering them.
    """
    body = await request.body()

    if settings.paystack_verify_webhooks and not gateway.verify_signature(
        body, paystack_signature
    ):
        logger.warning("Paystack webhook signature verification failed")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Invalid signature"},
        )

    try:
        payload = json.loads(body)
    except ValueError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid JSON payload"},
        )
    if not isinstance(payload, dict):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid JSON payload"},
        )

    try:
        outcome = await handle_event(db, payload, settings=settings)
    except (NotFound, ValidationFailed) as e:
        logger.warning(f"Acknowledging unprocessable {payload.get('event')} event: {e.message}")
        return {"received": True, "ignored": e.message}
    except Exception as e:
        logger.error(
            f"Error processing Paystack webhook {payload.get('event')}: {str(e)}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )

    return {"received": True, **outcome}
