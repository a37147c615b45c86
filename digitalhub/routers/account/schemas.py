"""Account schemas: auth, profile and referrals."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    fullName: Optional[str] = Field(None, max_length=200)
    referralCode: Optional[str] = Field(None, max_length=16)


class SigninRequest(BaseModel):
    email: EmailStr
    password: str


class AuthUser(BaseModel):
    id: int
    email: str


class AuthResponse(BaseModel):
    token: str
    user: AuthUser


class ProfileResponse(BaseModel):
    user_id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    bank_code: Optional[str] = None
    referral_code: str
    referred_by_code: Optional[str] = None
    is_admin: bool
    created_at: Optional[datetime] = None


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields. Referral and admin fields are not accepted."""

    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=32)
    bank_name: Optional[str] = Field(None, max_length=120)
    account_number: Optional[str] = Field(None, pattern=r"^\d{10}$")
    account_name: Optional[str] = Field(None, max_length=200)
    bank_code: Optional[str] = Field(None, max_length=16)


class ReferredUser(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    joined_at: Optional[datetime] = None


class ReferralsResponse(BaseModel):
    referral_code: str
    referral_link: str
    total_referrals: int
    total_earnings_minor: int
    total_earnings_ngn: float
    recent_referrals: List[ReferredUser]
