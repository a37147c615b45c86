"""Admin schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class AdminStatsResponse(BaseModel):
    total_users: int
    total_products: int
    total_sales: int
    total_revenue_minor: int
    total_revenue_ngn: float
    total_commissions_minor: int
    total_commissions_ngn: float
    pending_withdrawals: int
    pending_withdrawals_minor: int


class AdminWithdrawalResponse(BaseModel):
    id: int
    user_id: int
    email: Optional[str] = None
    full_name: Optional[str] = None
    amount_minor: int
    amount_ngn: float
    processing_fee_minor: int
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


class ProductCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    category: str = Field("ebooks", min_length=1, max_length=64)
    price_minor: int = Field(..., gt=0, description="Price in kobo")
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    is_active: bool = True
    tags: List[str] = []
    file_format: Optional[str] = None
    file_size_mb: Optional[float] = Field(None, ge=0)
    author_creator: Optional[str] = None
    brand: Optional[str] = None
    product_version: Optional[str] = None
    licensing_info: Optional[str] = None


class ProductUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=64)
    price_minor: Optional[int] = Field(None, gt=0)
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
    file_format: Optional[str] = None
    file_size_mb: Optional[float] = Field(None, ge=0)
    author_creator: Optional[str] = None
    brand: Optional[str] = None
    product_version: Optional[str] = None
    licensing_info: Optional[str] = None
