from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from core.config import settings
from middleware.rate_limiter import limiter
from schemas.common import envelope
from schemas.purchases import PurchaseCreate, PurchaseUpdate, PurchaseResponse
from services.purchase_service import PurchaseService
from utils.deps import db_dependency, require_permission

router = APIRouter(
    prefix="/purchases",
    tags=["purchases"]
)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def create_purchase(request: Request, body: PurchaseCreate, db: db_dependency,
                          user: Annotated[dict, Depends(require_permission("purchases", "create"))]):
    purchase = PurchaseService.create_purchase(db, body, acting_user_id=user.get("user_id"))
    return envelope("Purchase added successfully", PurchaseResponse.model_validate(purchase))


@router.get("", status_code=status.HTTP_200_OK)
async def list_purchases(db: db_dependency,
                         user: Annotated[dict, Depends(require_permission("purchases", "read"))],
                         offset: int = Query(0, ge=0),
                         page_size: int = Query(10, ge=1, le=100)):
    rows, count = PurchaseService.list_purchases(db, offset=offset, limit=page_size)
    return envelope(
        "Purchase retrieved successfully",
        [PurchaseResponse.model_validate(row) for row in rows],
        count=count
    )


# Declared before /{purchase_id} so "analytics" is not parsed as an id
@router.get("/analytics", status_code=status.HTTP_200_OK)
async def purchase_analytics(db: db_dependency,
                             user: Annotated[dict, Depends(require_permission("purchases", "read"))],
                             start_date: Optional[datetime] = Query(None, alias="startDate"),
                             end_date: Optional[datetime] = Query(None, alias="endDate")):
    data = PurchaseService.analytics(db, start_date=start_date, end_date=end_date)
    return envelope("Purchase analytics retrieved successfully", data)


@router.get("/{purchase_id}", status_code=status.HTTP_200_OK)
async def get_purchase(purchase_id: int, db: db_dependency,
                       user: Annotated[dict, Depends(require_permission("purchases", "read"))]):
    purchase = PurchaseService.get_purchase(db, purchase_id)
    return envelope("Purchase retrieved successfully", PurchaseResponse.model_validate(purchase))


@router.patch("/{purchase_id}", status_code=status.HTTP_200_OK)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def update_purchase(request: Request, purchase_id: int, body: PurchaseUpdate, db: db_dependency,
                          user: Annotated[dict, Depends(require_permission("purchases", "update"))]):
    purchase = PurchaseService.update_purchase(db, purchase_id, body)
    return envelope("Purchase updated successfully", PurchaseResponse.model_validate(purchase))


@router.delete("/{purchase_id}", status_code=status.HTTP_200_OK)
@limiter.limit(settings.MUTATION_RATE_LIMIT)
async def delete_purchase(request: Request, purchase_id: int, db: db_dependency,
                          user: Annotated[dict, Depends(require_permission("purchases", "delete"))]):
    PurchaseService.delete_purchase(db, purchase_id)
    return envelope("Purchase deleted successfully")
