"""
Wallet Service - Handles wallet balance adjustments and queries

Balances only move through single UPDATE statements that increment the
stored columns, so concurrent settlements never overwrite each other.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.db import utcnow
from digitalhub.models.ledger import Wallet

logger = logging.getLogger(__name__)

KOBO_PER_NAIRA = 100


def round_minor(value: Decimal) -> int:
    """Round half-up to a whole number of kobo."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_rate(amount_minor: int, rate: Union[Decimal, str, float]) -> int:
    return round_minor(Decimal(amount_minor) * Decimal(str(rate)))


def minor_to_major(amount_minor: Optional[int]) -> float:
    return round((amount_minor or 0) / KOBO_PER_NAIRA, 2)


def major_to_minor(amount: Union[Decimal, float, int, str]) -> int:
    return round_minor(Decimal(str(amount)) * KOBO_PER_NAIRA)


async def get_wallet(db: AsyncSession, user_id: int) -> Optional[Wallet]:
    stmt = (
        select(Wallet)
        .where(Wallet.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def ensure_wallet(db: AsyncSession, user_id: int) -> Wallet:
    wallet = await get_wallet(db, user_id)
    if wallet is None:
        wallet = Wallet(
            user_id=user_id,
            balance_minor=0,
            total_earned_minor=0,
            total_withdrawn_minor=0,
        )
        db.add(wallet)
        await db.flush()
    return wallet


async def credit_wallet(db: AsyncSession, user_id: int, amount_minor: int) -> None:
    """
    Credit earnings to a user's wallet, creating the wallet on first credit.

    Does not commit; the caller owns the transaction.
    """
    if amount_minor <= 0:
        return

    stmt = (
        update(Wallet)
        .where(Wallet.user_id == user_id)
        .values(
            balance_minor=Wallet.balance_minor + amount_minor,
            total_earned_minor=Wallet.total_earned_minor + amount_minor,
            updated_at=utcnow(),
        )
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        db.add(
            Wallet(
                user_id=user_id,
                balance_minor=amount_minor,
                total_earned_minor=amount_minor,
                total_withdrawn_minor=0,
            )
        )
        await db.flush()

    logger.info(f"Credited {amount_minor} kobo to wallet of user {user_id}")


async def debit_wallet_for_withdrawal(
    db: AsyncSession, user_id: int, amount_minor: int
) -> None:
    """Move a completed withdrawal out of the balance. Does not commit."""
    stmt = (
        update(Wallet)
        .where(Wallet.user_id == user_id)
        .values(
            balance_minor=Wallet.balance_minor - amount_minor,
            total_withdrawn_minor=Wallet.total_withdrawn_minor + amount_minor,
            updated_at=utcnow(),
        )
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        logger.error(f"No wallet found for user {user_id} while debiting {amount_minor} kobo")
        return

    logger.info(f"Debited {amount_minor} kobo from wallet of user {user_id}")


def wallet_to_dict(wallet: Optional[Wallet]) -> Dict[str, Any]:
    balance = wallet.balance_minor if wallet else 0
    earned = wallet.total_earned_minor if wallet else 0
    withdrawn = wallet.total_withdrawn_minor if wallet else 0
    return {
        "balance_minor": balance,
        "balance_ngn": minor_to_major(balance),
        "total_earned_minor": earned,
        "total_earned_ngn": minor_to_major(earned),
        "total_withdrawn_minor": withdrawn,
        "total_withdrawn_ngn": minor_to_major(withdrawn),
        "updated_at": wallet.updated_at.isoformat() if wallet and wallet.updated_at else None,
    }
