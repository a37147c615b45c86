"""Payments/Wallet/Withdrawal schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class WalletResponse(BaseModel):
    balance_minor: int
    balance_ngn: float
    total_earned_minor: int
    total_earned_ngn: float
    total_withdrawn_minor: int
    total_withdrawn_ngn: float
    available_minor: int
    available_ngn: float
    updated_at: Optional[str] = None


class SaleCreateRequest(BaseModel):
    product_id: int = Field(..., gt=0)
    reference: str = Field(..., min_length=1, max_length=200)


class SaleResponse(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_title: Optional[str] = None
    buyer_email: Optional[str] = None
    kind: str
    sale_amount_minor: int
    sale_amount_ngn: float
    commission_amount_minor: int
    commission_amount_ngn: float
    status: str
    transaction_id: str
    created_at: Optional[datetime] = None


class SettlementResponse(BaseModel):
    success: bool = True
    status: str
    sale_id: Optional[int] = None
    commission_minor: int = 0
    commission_ngn: float = 0.0
    admin_minor: int = 0
    referral_minor: int = 0


class WithdrawalCreateRequest(BaseModel):
    amount_minor: int = Field(..., gt=0, description="Amount in kobo")
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    bank_code: Optional[str] = None


class WithdrawalResponse(BaseModel):
    id: int
    user_id: int
    amount_minor: int
    amount_ngn: float
    processing_fee_minor: int
    processing_fee_ngn: float
    net_amount_minor: int
    net_amount_ngn: float
    bank_name: str
    account_number: str
    account_name: str
    bank_code: str
    status: str
    reference: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: Optional[str] = None
    processed_at: Optional[str] = None


class BankAccountVerifyRequest(BaseModel):
    account_number: str = Field(..., min_length=1)
    bank_code: str = Field(..., min_length=1)


class BankAccountData(BaseModel):
    account_name: Optional[str] = None
    account_number: str


class BankAccountVerifyResponse(BaseModel):
    success: bool = True
    data: BankAccountData


class Bank(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    slug: Optional[str] = None


class BankListResponse(BaseModel):
    success: bool = True
    data: List[Bank]


class TransferDecisionRequest(BaseModel):
    withdrawalId: int
    action: str = Field(..., description="approve or reject")
    notes: Optional[str] = None


class TransferDecisionResponse(BaseModel):
    success: bool
    message: str
    reference: Optional[str] = None
