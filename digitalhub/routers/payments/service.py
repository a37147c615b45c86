"""Payments/Wallet/Withdrawal service layer."""

import logging
from typing import List

from digitalhub.core.errors import Forbidden, NotFound, ValidationFailed
from digitalhub.services import commission_service, withdrawal_service
from digitalhub.services.paystack_service import transaction_metadata
from digitalhub.services.wallet_service import get_wallet, minor_to_major, wallet_to_dict

from . import repository as payments_repository
from .schemas import (
    BankAccountData,
    BankAccountVerifyRequest,
    BankAccountVerifyResponse,
    BankListResponse,
    SaleCreateRequest,
    SaleResponse,
    SettlementResponse,
    TransferDecisionRequest,
    TransferDecisionResponse,
    WalletResponse,
    WithdrawalCreateRequest,
    WithdrawalResponse,
)

logger = logging.getLogger(__name__)


async def get_wallet_info(db, *, user) -> WalletResponse:
    wallet = await get_wallet(db, user.id)
    available = await withdrawal_service.available_balance(db, user.id)
    return WalletResponse(
        **wallet_to_dict(wallet),
        available_minor=available,
        available_ngn=minor_to_major(available),
    )


async def list_sales(db, *, user) -> List[SaleResponse]:
    rows = await payments_repository.list_sales_for_seller(db, seller_id=user.id)
    return [
        SaleResponse(
            id=sale.id,
            product_id=sale.product_id,
            product_title=title,
            buyer_email=sale.buyer_email,
            kind=sale.kind,
            sale_amount_minor=sale.sale_amount_minor,
            sale_amount_ngn=minor_to_major(sale.sale_amount_minor),
            commission_amount_minor=sale.commission_amount_minor,
            commission_amount_ngn=minor_to_major(sale.commission_amount_minor),
            status=sale.status,
            transaction_id=sale.transaction_id,
            created_at=sale.created_at,
        )
        for sale, title in rows
    ]


async def record_sale(db, *, user, gateway, request: SaleCreateRequest) -> SettlementResponse:
    """
    Settle a sale the client reports, after confirming it with Paystack.

    Commission is always computed server side from the verified amount.
    """
    transaction = await gateway.verify_transaction(request.reference)
    if transaction.get("status") != "success":
        raise ValidationFailed("Payment has not been completed")

    product = await payments_repository.get_product(db, product_id=request.product_id)
    if product is None or not product.is_active:
        raise NotFound("Product not found")

    amount_minor = int(transaction.get("amount") or 0)
    if amount_minor < product.price_minor:
        raise ValidationFailed("Payment amount does not match product price")

    metadata = transaction_metadata(transaction)
    seller_hint = metadata.get("user_id")
    if seller_hint is not None and str(seller_hint) != str(user.id):
        raise Forbidden("Payment was made for another seller")

    result = await commission_service.settle_product_sale(
        db,
        commission_service.ProductSaleEvent(
            product_id=product.id,
            seller_id=user.id,
            buyer_email=(transaction.get("customer") or {}).get("email"),
            amount_minor=amount_minor,
            reference=request.reference,
        ),
    )
    return SettlementResponse(
        status=result.status,
        sale_id=result.sale_id,
        commission_minor=result.commission_minor,
        commission_ngn=minor_to_major(result.commission_minor),
        admin_minor=result.admin_minor,
        referral_minor=result.referral_minor,
    )


async def create_withdrawal(db, *, user, request: WithdrawalCreateRequest) -> WithdrawalResponse:
    """Bank details default to the ones saved on the profile."""
    profile = await payments_repository.get_profile(db, user_id=user.id)

    def pick(field: str):
        value = getattr(request, field)
        if value:
            return value
        return getattr(profile, field, None) if profile else None

    bank_details = withdrawal_service.BankDetails(
        bank_name=pick("bank_name"),
        account_number=pick("account_number"),
        account_name=pick("account_name"),
        bank_code=pick("bank_code"),
    )
    withdrawal = await withdrawal_service.request_withdrawal(
        db, user.id, request.amount_minor, bank_details
    )
    return WithdrawalResponse(**withdrawal_service.withdrawal_to_dict(withdrawal))


async def list_withdrawals(db, *, user) -> List[WithdrawalResponse]:
    withdrawals = await withdrawal_service.list_user_withdrawals(db, user.id)
    return [WithdrawalResponse(**withdrawal_service.withdrawal_to_dict(w)) for w in withdrawals]


async def list_banks(*, gateway) -> BankListResponse:
    return BankListResponse(data=await gateway.list_banks())


async def verify_bank_account(*, gateway, request: BankAccountVerifyRequest) -> BankAccountVerifyResponse:
    account = await gateway.resolve_account(request.account_number, request.bank_code)
    return BankAccountVerifyResponse(data=BankAccountData(**account))


async def decide_transfer(
    db, *, admin, gateway, request: TransferDecisionRequest
) -> TransferDecisionResponse:
    result = await withdrawal_service.admin_decide(
        db, gateway, request.withdrawalId, request.action, request.notes, admin
    )
    return TransferDecisionResponse(**result)
