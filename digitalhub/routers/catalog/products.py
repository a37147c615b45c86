"""Products Router - public catalog browsing."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digitalhub.core.errors import NotFound
from digitalhub.db import get_db
from digitalhub.models.catalog import Product
from digitalhub.services.wallet_service import minor_to_major

from . import repository as catalog_repository
from .schemas import ProductResponse

router = APIRouter(prefix="/products", tags=["Products"])


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        title=product.title,
        description=product.description,
        category=product.category,
        price_minor=product.price_minor,
        price_ngn=minor_to_major(product.price_minor),
        file_url=product.file_url,
        thumbnail_url=product.thumbnail_url,
        preview_url=product.preview_url,
        download_count=product.download_count or 0,
        is_active=bool(product.is_active),
        tags=list(product.tags or []),
        file_format=product.file_format,
        file_size_mb=product.file_size_mb,
        author_creator=product.author_creator,
        brand=product.brand,
        product_version=product.product_version,
        licensing_info=product.licensing_info,
        created_at=product.created_at,
    )


@router.get("", response_model=List[ProductResponse])
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    List active products, optionally filtered by category and a title or
    description search. ``category=all`` means no category filter.
    """
    if category == "all":
        category = None
    products = await catalog_repository.list_active_products(
        db, category=category, search=search
    )
    return [product_to_response(p) for p in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await catalog_repository.get_active_product(db, product_id=product_id)
    if product is None:
        raise NotFound("Product not found")
    return product_to_response(product)
