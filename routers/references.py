"""
Routers for the entities products hang off.

They are thin and identical apart from their schemas, so one factory builds
them all around a ReferenceService. Rate limiting comes from the global
default limits (SlowAPIMiddleware), not per-route decorators.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from models.brands import Brand
from models.catalogs import Catalog
from models.categories import Category
from models.sub_categories import SubCategory
from models.vehicle_types import VehicleType
from models.vendors import Vendor
from models.websites import Website
from schemas.common import envelope
from schemas.references import (
    NamedEntityCreate, NamedEntityUpdate, NamedEntityResponse,
    SubCategoryCreate, SubCategoryUpdate, SubCategoryResponse,
    WebsiteCreate, WebsiteUpdate, WebsiteResponse,
    VendorCreate, VendorUpdate, VendorResponse,
)
from services.reference_service import ReferenceService
from utils.deps import db_dependency, require_permission


def build_router(prefix: str, service: ReferenceService, create_schema, update_schema,
                 response_schema, module: str = "catalog") -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])
    label = service.label

    can_create = Annotated[dict, Depends(require_permission(module, "create"))]
    can_read = Annotated[dict, Depends(require_permission(module, "read"))]
    can_update = Annotated[dict, Depends(require_permission(module, "update"))]
    can_delete = Annotated[dict, Depends(require_permission(module, "delete"))]

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create(body: create_schema, db: db_dependency, user: can_create):
        entity, restored = service.create(db, body.model_dump())
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=envelope(
                f"{label} created successfully",
                response_schema.model_validate(entity).model_dump(mode="json")
            ),
            headers={"X-Restored": "true"} if restored else None
        )

    @router.get("", status_code=status.HTTP_200_OK)
    async def list_entities(db: db_dependency, user: can_read,
                            offset: int = Query(0, ge=0),
                            page_size: int = Query(10, ge=1, le=100)):
        rows, count = service.list(db, offset=offset, limit=page_size)
        return envelope(
            f"{label} retrieved successfully",
            [response_schema.model_validate(row) for row in rows],
            count=count
        )

    @router.get("/{entity_id}", status_code=status.HTTP_200_OK)
    async def get(entity_id: int, db: db_dependency, user: can_read):
        entity = service.get(db, entity_id)
        return envelope(f"{label} retrieved successfully", response_schema.model_validate(entity))

    @router.patch("/{entity_id}", status_code=status.HTTP_200_OK)
    async def update(entity_id: int, body: update_schema, db: db_dependency, user: can_update):
        entity = service.update(db, entity_id, body.model_dump(exclude_unset=True, exclude_none=True))
        return envelope(f"{label} updated successfully", response_schema.model_validate(entity))

    @router.delete("/{entity_id}", status_code=status.HTTP_200_OK)
    async def delete(entity_id: int, db: db_dependency, user: can_delete):
        service.soft_delete(db, entity_id)
        return envelope(f"{label} deleted successfully")

    @router.post("/{entity_id}/restore", status_code=status.HTTP_200_OK)
    async def restore(entity_id: int, db: db_dependency, user: can_update):
        entity = service.restore(db, entity_id)
        return envelope(f"{label} restored successfully", response_schema.model_validate(entity))

    return router


catalog_service = ReferenceService(Catalog, "Catalog")
category_service = ReferenceService(Category, "Category")
sub_category_service = ReferenceService(
    SubCategory, "Sub category", parents={"category_id": (Category, "Category")}
)
brand_service = ReferenceService(Brand, "Brand")
vehicle_type_service = ReferenceService(VehicleType, "Vehicle type")
website_service = ReferenceService(Website, "Website")
vendor_service = ReferenceService(Vendor, "Vendor")

routers = [
    build_router("/catalogs", catalog_service, NamedEntityCreate, NamedEntityUpdate, NamedEntityResponse),
    build_router("/categories", category_service, NamedEntityCreate, NamedEntityUpdate, NamedEntityResponse),
    build_router("/sub-categories", sub_category_service, SubCategoryCreate, SubCategoryUpdate, SubCategoryResponse),
    build_router("/brands", brand_service, NamedEntityCreate, NamedEntityUpdate, NamedEntityResponse),
    build_router("/vehicle-types", vehicle_type_service, NamedEntityCreate, NamedEntityUpdate, NamedEntityResponse),
    build_router("/websites", website_service, WebsiteCreate, WebsiteUpdate, WebsiteResponse),
    build_router("/vendors", vendor_service, VendorCreate, VendorUpdate, VendorResponse, module="purchases"),
]
