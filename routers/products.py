from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from core.config import settings
from middleware.rate_limiter import limiter
from schemas.common import envelope
from schemas.products import (ProductCreate, ProductUpdate, ProductResponse,
                              InventoryChangeResponse)
from services.product_service import ProductService
from utils.deps import db_dependency, require_permission

router = APIRouter(
    prefix="/products",
    tags=["products"]
)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def create_product(request: Request, body: ProductCreate, db: db_dependency,
                         user: Annotated[dict, Depends(require_permission("products", "create"))]):
    product = ProductService.create_product(db, body, acting_user_id=user.get("user_id"))
    return envelope("Product created successfully", ProductResponse.model_validate(product))


@router.get("", status_code=status.HTTP_200_OK)
async def list_products(db: db_dependency,
                        user: Annotated[dict, Depends(require_permission("products", "read"))],
                        offset: int = Query(0, ge=0),
                        page_size: int = Query(10, ge=1, le=100),
                        product_status: Optional[str] = Query(None, alias="status")):
    rows, count = ProductService.list_products(db, offset=offset, limit=page_size, status=product_status)
    return envelope(
        "Products retrieved successfully",
        [ProductResponse.model_validate(row) for row in rows],
        count=count
    )


@router.get("/{product_id}", status_code=status.HTTP_200_OK)
async def get_product(product_id: int, db: db_dependency,
                      user: Annotated[dict, Depends(require_permission("products", "read"))]):
    product = ProductService.get_product(db, product_id)
    return envelope("Product retrieved successfully", ProductResponse.model_validate(product))


@router.patch("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def update_product(request: Request, product_id: int, body: ProductUpdate, db: db_dependency,
                         user: Annotated[dict, Depends(require_permission("products", "update"))]):
    product = ProductService.update_product(db, product_id, body)
    return envelope("Product updated successfully", ProductResponse.model_validate(product))


@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def delete_product(request: Request, product_id: int, db: db_dependency,
                         user: Annotated[dict, Depends(require_permission("products", "delete"))]):
    ProductService.soft_delete_product(db, product_id)
    return envelope("Product deleted successfully")


@router.post("/{product_id}/restore", status_code=status.HTTP_200_OK)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def restore_product(request: Request, product_id: int, db: db_dependency,
                          user: Annotated[dict, Depends(require_permission("products", "update"))]):
    product = ProductService.restore_product(db, product_id)
    return envelope("Product restored successfully", ProductResponse.model_validate(product))


@router.get("/{product_id}/inventory-changes", status_code=status.HTTP_200_OK)
async def list_inventory_changes(product_id: int, db: db_dependency,
                                 user: Annotated[dict, Depends(require_permission("inventory", "read"))]):
    changes = ProductService.list_inventory_changes(db, product_id)
    return envelope(
        "Inventory changes retrieved successfully",
        [InventoryChangeResponse.model_validate(change) for change in changes]
    )
