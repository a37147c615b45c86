"""Banks Router - Paystack bank list and account name lookup."""

from fastapi import APIRouter, Depends

from digitalhub.dependencies import get_gateway
from digitalhub.services.paystack_service import PaystackClient

from .schemas import BankAccountVerifyRequest, BankAccountVerifyResponse, BankListResponse
from .service import list_banks as service_list_banks
from .service import verify_bank_account as service_verify_bank_account

router = APIRouter(tags=["Banks"])


@router.get("/banks", response_model=BankListResponse)
async def list_banks(gateway: PaystackClient = Depends(get_gateway)):
    return await service_list_banks(gateway=gateway)


@router.post("/verify-bank-account", response_model=BankAccountVerifyResponse)
async def verify_bank_account(
    request: BankAccountVerifyRequest,
    gateway: PaystackClient = Depends(get_gateway),
):
    return await service_verify_bank_account(gateway=gateway, request=request)
