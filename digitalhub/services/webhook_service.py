"""
Paystack webhook dispatch

Routes a parsed ``{event, data}`` envelope to the commission and withdrawal
services. Signature checking and HTTP status mapping live in the router.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.config import Settings
from digitalhub.core.errors import ValidationFailed
from digitalhub.services import commission_service, withdrawal_service
from digitalhub.services.paystack_service import transaction_metadata

logger = logging.getLogger(__name__)

CHARGE_SUCCESS = "charge.success"
TRANSFER_SUCCESS = "transfer.success"
TRANSFER_FAILED = "transfer.failed"
TRANSFER_REVERSED = "transfer.reversed"


def _int_field(source: Dict[str, Any], name: str) -> int:
    value = source.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"Webhook field {name} is missing or invalid")


def _reference(data: Dict[str, Any]) -> str:
    reference = data.get("reference")
    if not reference:
        raise ValidationFailed("Webhook data has no reference")
    return str(reference)


async def _handle_charge_success(
    db: AsyncSession, data: Dict[str, Any], settings: Settings
) -> Dict[str, Any]:
    metadata = transaction_metadata(data)
    purchase_type = metadata.get("type")
    buyer_email: Optional[str] = (data.get("customer") or {}).get("email")

    if purchase_type == "product_purchase":
        result = await commission_service.settle_product_sale(
            db,
            commission_service.ProductSaleEvent(
                product_id=_int_field(metadata, "product_id"),
                seller_id=_int_field(metadata, "user_id"),
                buyer_email=buyer_email,
                amount_minor=_int_field(data, "amount"),
                reference=_reference(data),
            ),
        )
        return {"handled": "product_purchase", "status": result.status}

    if purchase_type == "subscription":
        result = await commission_service.settle_subscription_purchase(
            db,
            commission_service.SubscriptionPurchaseEvent(
                user_id=_int_field(metadata, "user_id"),
                plan_id=_int_field(metadata, "plan_id"),
                amount_minor=_int_field(data, "amount"),
                reference=_reference(data),
                buyer_email=buyer_email,
            ),
            record_referral_commission=settings.record_subscription_referral_commissions,
        )
        return {"handled": "subscription", "status": result.status}

    logger.info(f"Ignoring charge.success with metadata type {purchase_type!r}")
    return {"handled": None}


async def handle_event(
    db: AsyncSession, payload: Dict[str, Any], *, settings: Settings
) -> Dict[str, Any]:
    """
    Apply one webhook event. Unknown events are ignored.

    Domain errors propagate to the caller.
    """
    event = payload.get("event")
    data = payload.get("data") or {}
    logger.info(f"Webhook event received: {event}")

    if event == CHARGE_SUCCESS:
        return await _handle_charge_success(db, data, settings)

    if event == TRANSFER_SUCCESS:
        changed = await withdrawal_service.on_transfer_success(db, _reference(data))
        return {"handled": event, "changed": changed}

    if event == TRANSFER_FAILED:
        changed = await withdrawal_service.on_transfer_failed(db, _reference(data))
        return {"handled": event, "changed": changed}

    if event == TRANSFER_REVERSED:
        changed = await withdrawal_service.on_transfer_reversed(db, _reference(data))
        return {"handled": event, "changed": changed}

    logger.info(f"Ignoring unhandled webhook event {event}")
    return {"handled": None}
