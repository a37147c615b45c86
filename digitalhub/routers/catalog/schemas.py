"""Catalog schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ProductResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: str
    price_minor: int
    price_ngn: float
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    download_count: int
    is_active: bool
    tags: List[str] = []
    file_format: Optional[str] = None
    file_size_mb: Optional[float] = None
    author_creator: Optional[str] = None
    brand: Optional[str] = None
    product_version: Optional[str] = None
    licensing_info: Optional[str] = None
    created_at: Optional[datetime] = None


class SubscriptionPlanResponse(BaseModel):
    id: int
    name: str
    price_minor: int
    price_ngn: float
    duration_months: int
    commission_rate: float


class UserSubscriptionResponse(BaseModel):
    id: int
    plan_id: int
    plan_name: str
    commission_rate: float
    status: str
    start_date: datetime
    end_date: datetime
    payment_reference: Optional[str] = None
