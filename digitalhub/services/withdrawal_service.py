"""
Withdrawal Service - Payout requests and their transfer lifecycle

    pending -> processing -> completed
    pending -> processing -> failed
    pending -> rejected

The wallet is only debited when Paystack confirms the transfer. Until then
open requests are reserved against the balance so a user cannot request
more than they hold.
"""
import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.errors import Conflict, GatewayError, NotFound, ValidationFailed
from digitalhub.db import utcnow
from digitalhub.models.ledger import Wallet, WithdrawalRequest
from digitalhub.models.user import Profile, User
from digitalhub.services.paystack_service import PaystackClient
from digitalhub.services.wallet_service import debit_wallet_for_withdrawal, minor_to_major

logger = logging.getLogger(__name__)

MIN_WITHDRAWAL_MINOR = 100_000  # NGN 1,000
PROCESSING_FEE_MINOR = 5_000  # NGN 50

OPEN_STATUSES = ("pending", "processing")

APPROVE_DEFAULT_NOTES = "Transfer initiated"
REJECT_DEFAULT_NOTES = "Withdrawal rejected by admin"
TRANSFER_FAILED_NOTES = "Transfer failed - balance refunded"

_REFERENCE_CHARSET = string.ascii_lowercase + string.digits


@dataclass
class BankDetails:
    bank_name: Optional[str]
    account_number: Optional[str]
    account_name: Optional[str]
    bank_code: Optional[str]

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("bank_name", "account_number", "account_name", "bank_code")
            if not (getattr(self, name) or "").strip()
        ]


def generate_transfer_reference() -> str:
    suffix = "".join(secrets.choice(_REFERENCE_CHARSET) for _ in range(9))
    return f"withdrawal_{int(time.time() * 1000)}_{suffix}"


async def _wallet_balance(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(select(Wallet.balance_minor).where(Wallet.user_id == user_id))
    return result.scalar_one_or_none() or 0


async def reserved_amount(
    db: AsyncSession,
    user_id: int,
    *,
    statuses=OPEN_STATUSES,
    exclude_id: Optional[int] = None,
) -> int:
    """Sum of withdrawal amounts in ``statuses`` that are not yet debited."""
    stmt = select(func.coalesce(func.sum(WithdrawalRequest.amount_minor), 0)).where(
        WithdrawalRequest.user_id == user_id,
        WithdrawalRequest.status.in_(statuses),
    )
    if exclude_id is not None:
        stmt = stmt.where(WithdrawalRequest.id != exclude_id)
    result = await db.execute(stmt)
    return int(result.scalar_one() or 0)


async def available_balance(db: AsyncSession, user_id: int) -> int:
    return await _wallet_balance(db, user_id) - await reserved_amount(db, user_id)


async def request_withdrawal(
    db: AsyncSession, user_id: int, amount_minor: int, bank_details: BankDetails
) -> WithdrawalRequest:
    """
    Create a pending withdrawal. The wallet is not touched.

    Raises:
        ValidationFailed: below minimum, missing bank details, or more than
        the balance left after other open withdrawals
    """
    if amount_minor is None or amount_minor < MIN_WITHDRAWAL_MINOR:
        raise ValidationFailed(
            f"Minimum withdrawal amount is NGN {minor_to_major(MIN_WITHDRAWAL_MINOR):,.2f}"
        )

    missing = bank_details.missing_fields()
    if missing:
        raise ValidationFailed(f"Missing bank details: {', '.join(missing)}")

    available = await available_balance(db, user_id)
    if amount_minor > available:
        raise ValidationFailed("Insufficient balance")

    withdrawal = WithdrawalRequest(
        user_id=user_id,
        amount_minor=amount_minor,
        processing_fee_minor=PROCESSING_FEE_MINOR,
        net_amount_minor=amount_minor - PROCESSING_FEE_MINOR,
        bank_name=bank_details.bank_name.strip(),
        account_number=bank_details.account_number.strip(),
        account_name=bank_details.account_name.strip(),
        bank_code=bank_details.bank_code.strip(),
        status="pending",
    )
    db.add(withdrawal)
    await db.commit()
    await db.refresh(withdrawal)

    logger.info(
        f"Withdrawal {withdrawal.id} requested by user {user_id}: "
        f"amount={amount_minor} net={withdrawal.net_amount_minor}"
    )
    return withdrawal


async def list_user_withdrawals(db: AsyncSession, user_id: int) -> List[WithdrawalRequest]:
    stmt = (
        select(WithdrawalRequest)
        .where(WithdrawalRequest.user_id == user_id)
        .order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _set_status(
    db: AsyncSession, withdrawal_id: int, *, from_status: str, **values
) -> bool:
    stmt = (
        update(WithdrawalRequest)
        .where(
            WithdrawalRequest.id == withdrawal_id,
            WithdrawalRequest.status == from_status,
        )
        .values(**values)
    )
    result = await db.execute(stmt)
    return result.rowcount > 0


async def admin_decide(
    db: AsyncSession,
    gateway: PaystackClient,
    withdrawal_id: int,
    action: str,
    notes: Optional[str],
    admin: User,
) -> Dict[str, Any]:
    """
    Approve (start a Paystack transfer) or reject a pending withdrawal.

    Approval claims the row by moving it pending -> processing before any
    gateway call, so two admins can never both pay out the same request.
    If the gateway fails the claim is released back to pending.
    """
    withdrawal = await db.get(WithdrawalRequest, withdrawal_id, populate_existing=True)
    if withdrawal is None:
        raise NotFound("Withdrawal request not found")

    if action not in ("approve", "reject"):
        raise ValidationFailed("Invalid action")

    if withdrawal.status != "pending":
        raise Conflict(f"Withdrawal is not pending. Current status: {withdrawal.status}")

    if action == "reject":
        rejected = await _set_status(
            db,
            withdrawal.id,
            from_status="pending",
            status="rejected",
            admin_notes=notes or REJECT_DEFAULT_NOTES,
            admin_id=admin.id,
            processed_at=utcnow(),
        )
        if not rejected:
            await db.rollback()
            raise Conflict("Withdrawal was already processed")
        await db.commit()
        logger.info(f"Withdrawal {withdrawal.id} rejected by admin {admin.id}")
        return {"success": True, "message": "Withdrawal request rejected"}

    balance = await _wallet_balance(db, withdrawal.user_id)
    in_flight = await reserved_amount(
        db, withdrawal.user_id, statuses=("processing",), exclude_id=withdrawal.id
    )
    if withdrawal.amount_minor + in_flight > balance:
        raise ValidationFailed("Insufficient balance to approve this withdrawal")

    # Stored with the claim: the transfer callback can arrive before
    # initiate_transfer returns.
    reference = generate_transfer_reference()
    claimed = await _set_status(
        db,
        withdrawal.id,
        from_status="pending",
        status="processing",
        reference=reference,
        admin_id=admin.id,
    )
    if not claimed:
        await db.rollback()
        raise Conflict("Withdrawal was already processed")
    await db.commit()

    profile_result = await db.execute(
        select(Profile.full_name).where(Profile.user_id == withdrawal.user_id)
    )
    full_name = profile_result.scalar_one_or_none() or withdrawal.account_name

    try:
        recipient_code = await gateway.create_transfer_recipient(
            name=withdrawal.account_name,
            account_number=withdrawal.account_number,
            bank_code=withdrawal.bank_code,
        )
        await gateway.initiate_transfer(
            amount_minor=withdrawal.net_amount_minor,
            recipient_code=recipient_code,
            reference=reference,
            reason=f"Withdrawal from Olamco Digital Hub - {full_name}",
        )
    except Exception as e:
        logger.error(f"Transfer for withdrawal {withdrawal.id} failed: {str(e)}")
        await _set_status(
            db,
            withdrawal.id,
            from_status="processing",
            status="pending",
            reference=None,
            admin_id=None,
        )
        await db.commit()
        if isinstance(e, GatewayError):
            raise
        raise GatewayError(f"Transfer failed: {str(e)}") from e

    await db.execute(
        update(WithdrawalRequest)
        .where(WithdrawalRequest.id == withdrawal.id)
        .values(recipient_code=recipient_code)
    )
    # Skipped when a transfer callback already settled the row
    await _set_status(
        db,
        withdrawal.id,
        from_status="processing",
        admin_notes=notes or APPROVE_DEFAULT_NOTES,
        processed_at=utcnow(),
    )
    await db.commit()

    logger.info(
        f"Withdrawal {withdrawal.id} approved by admin {admin.id}, transfer {reference} initiated"
    )
    return {
        "success": True,
        "message": "Transfer initiated successfully",
        "reference": reference,
    }


async def _get_by_reference(db: AsyncSession, reference: str) -> WithdrawalRequest:
    result = await db.execute(
        select(WithdrawalRequest)
        .where(WithdrawalRequest.reference == reference)
        .execution_options(populate_existing=True)
    )
    withdrawal = result.scalar_one_or_none()
    if withdrawal is None:
        raise NotFound(f"No withdrawal with transfer reference {reference}")
    return withdrawal


async def on_transfer_success(db: AsyncSession, reference: str) -> bool:
    """
    Complete a processing withdrawal and debit the wallet.

    Returns False when the withdrawal had already left ``processing``, which
    makes redelivered callbacks harmless.
    """
    withdrawal = await _get_by_reference(db, reference)
    try:
        completed = await _set_status(
            db,
            withdrawal.id,
            from_status="processing",
            status="completed",
            processed_at=utcnow(),
        )
        if completed:
            await debit_wallet_for_withdrawal(db, withdrawal.user_id, withdrawal.amount_minor)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    if not completed:
        logger.info(
            f"Transfer {reference} success ignored, withdrawal status is {withdrawal.status}"
        )
        return False

    logger.info(f"Withdrawal {withdrawal.id} completed via transfer {reference}")
    return True


async def on_transfer_failed(db: AsyncSession, reference: str) -> bool:
    """Mark a processing withdrawal failed. Nothing was debited, so the wallet is left alone."""
    withdrawal = await _get_by_reference(db, reference)
    failed = await _set_status(
        db,
        withdrawal.id,
        from_status="processing",
        status="failed",
        processed_at=utcnow(),
        admin_notes=TRANSFER_FAILED_NOTES,
    )
    await db.commit()

    if not failed:
        logger.info(
            f"Transfer {reference} failure ignored, withdrawal status is {withdrawal.status}"
        )
        return False

    logger.warning(f"Withdrawal {withdrawal.id} failed via transfer {reference}")
    return True


async def on_transfer_reversed(db: AsyncSession, reference: str) -> bool:
    return await on_transfer_failed(db, reference)


def withdrawal_to_dict(withdrawal: WithdrawalRequest) -> Dict[str, Any]:
    return {
        "id": withdrawal.id,
        "user_id": withdrawal.user_id,
        "amount_minor": withdrawal.amount_minor,
        "amount_ngn": minor_to_major(withdrawal.amount_minor),
        "processing_fee_minor": withdrawal.processing_fee_minor,
        "processing_fee_ngn": minor_to_major(withdrawal.processing_fee_minor),
        "net_amount_minor": withdrawal.net_amount_minor,
        "net_amount_ngn": minor_to_major(withdrawal.net_amount_minor),
        "bank_name": withdrawal.bank_name,
        "account_number": withdrawal.account_number,
        "account_name": withdrawal.account_name,
        "bank_code": withdrawal.bank_code,
        "status": withdrawal.status,
        "reference": withdrawal.reference,
        "admin_notes": withdrawal.admin_notes,
        "created_at": withdrawal.created_at.isoformat() if withdrawal.created_at else None,
        "processed_at": (
            withdrawal.processed_at.isoformat() if withdrawal.processed_at else None
        ),
    }
