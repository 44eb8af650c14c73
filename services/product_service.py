from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.brands import Brand
from models.catalogs import Catalog
from models.categories import Category
from models.inventory_changes import InventoryChange
from models.products import Product
from models.sub_categories import SubCategory
from models.vehicle_types import VehicleType
from models.websites import Website
from schemas.products import ProductCreate, ProductUpdate
from services.counter_ledger import CounterLedger, ParentKind, PRODUCT_FOREIGN_KEYS
from utils.logger import get_logger
from utils.slug import derive_slug

logger = get_logger(__name__)

# foreign key column -> (parent model, label used in errors)
PARENT_COLUMNS = {
    "catalog_id": (Catalog, "Catalog"),
    "category_id": (Category, "Category"),
    "sub_category_id": (SubCategory, "Sub category"),
    "brand_id": (Brand, "Brand"),
    "vehicle_type_id": (VehicleType, "Vehicle type"),
}


def parent_contributions(product: Product) -> dict[ParentKind, set[int]]:
    """Parents whose product_count this product currently adds one to."""
    contributions = {
        kind: {getattr(product, column)} - {None}
        for kind, column in PRODUCT_FOREIGN_KEYS.items()
    }
    contributions[ParentKind.WEBSITE] = set(product.website_ids)
    return contributions


class ProductService:
    """
    Product lifecycle.

    Each operation persists the product row and moves every affected parent
    counter inside one transaction, after the row is flushed so ids exist.
    """

    @staticmethod
    def get_product(db: Session, product_id: int, include_deleted: bool = False) -> Product:
        product = db.get(Product, product_id)
        if product is None or (product.is_deleted and not include_deleted):
            raise NotFoundError("Product not found", product_id=product_id)
        return product

    @staticmethod
    def list_products(db: Session, offset: int = 0, limit: int = 10, status: str | None = None):
        conditions = [Product.deleted_at.is_(None)]
        if status:
            conditions.append(Product.status == status)

        count = db.scalar(select(func.count(Product.id)).where(*conditions))
        rows = db.scalars(
            select(Product)
            .where(*conditions)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return rows, count

    @staticmethod
    def list_inventory_changes(db: Session, product_id: int) -> list[InventoryChange]:
        ProductService.get_product(db, product_id, include_deleted=True)
        return db.scalars(
            select(InventoryChange)
            .where(InventoryChange.product_id == product_id)
            .order_by(InventoryChange.id)
        ).all()

    @staticmethod
    def _load_parents(db: Session, values: dict) -> dict:
        """Resolve every non-null parent id in values to a live row or raise NotFound."""
        parents = {}
        for column, (model, label) in PARENT_COLUMNS.items():
            parent_id = values.get(column)
            if parent_id is None:
                continue
            parent = db.get(model, parent_id)
            if parent is None or parent.is_deleted:
                raise NotFoundError(f"{label} not found", **{column: parent_id})
            parents[column] = parent
        return parents

    @staticmethod
    def _load_websites(db: Session, website_ids) -> list[Website]:
        ids = set(website_ids)
        if not ids:
            return []
        websites = db.scalars(
            select(Website).where(Website.id.in_(ids), Website.deleted_at.is_(None))
        ).all()
        missing = ids - {website.id for website in websites}
        if missing:
            raise NotFoundError("Website not found", website_ids=sorted(missing))
        return list(websites)

    @staticmethod
    def _check_sub_category(db: Session, product: Product):
        if product.sub_category_id is None or product.category_id is None:
            return
        sub_category = db.get(SubCategory, product.sub_category_id)
        if sub_category.category_id != product.category_id:
            raise ValidationError(
                "Sub category does not belong to the selected category",
                sub_category_id=product.sub_category_id, category_id=product.category_id
            )

    @staticmethod
    def _apply_changes(db: Session, product: Product, changes: dict) -> bool:
        """
        Apply a partial payload to a live product and move counters by the diff.

        Returns whether anything changed. The version is bumped only then.
        """
        changes = dict(changes)
        expected_version = changes.pop("version", None)
        website_ids = changes.pop("website_ids", None)

        if expected_version is not None and expected_version != product.version:
            logger.warning(
                "Stale product update rejected",
                extra={"product_id": product.id, "expected_version": expected_version,
                       "version": product.version}
            )
            raise ConflictError(
                "Product was modified by another request, reload and retry",
                product_id=product.id, expected_version=expected_version, version=product.version
            )

        for column in ("name", "status", "sale_stock", "tags"):
            if column in changes and changes[column] is None:
                raise ValidationError(f"{column} cannot be null")

        # Only a newly attached parent has to be live; kept ones may be soft deleted
        ProductService._load_parents(db, {
            column: value for column, value in changes.items()
            if column in PARENT_COLUMNS and value != getattr(product, column)
        })
        before = parent_contributions(product)
        name_changed = "name" in changes and changes["name"] != product.name
        changed = False

        for field, value in changes.items():
            if getattr(product, field) != value:
                setattr(product, field, value)
                changed = True

        if name_changed:
            product.slug = derive_slug(product.name)
        if website_ids is not None and set(website_ids) != set(product.website_ids):
            wanted = set(website_ids)
            kept = [website for website in product.websites if website.id in wanted]
            added = ProductService._load_websites(db, wanted - set(product.website_ids))
            product.websites = kept + added
            changed = True

        if not changed:
            return False

        ProductService._check_sub_category(db, product)
        product.version += 1
        db.flush()
        CounterLedger.apply_diff(db, before, parent_contributions(product))
        return True

    @staticmethod
    def _restore(db: Session, product: Product):
        product.mark_restored()
        product.version += 1
        db.flush()
        CounterLedger.apply(db, parent_contributions(product), +1)

    @staticmethod
    def create_product(db: Session, request: ProductCreate, acting_user_id: int) -> Product:
        """
        Create a product, or revive a soft-deleted one with the same SKU.

        A revived product first regains its old counter contributions, then the
        payload is applied as an update.
        """
        with transaction(db):
            existing = db.query(Product).filter(Product.sku == request.sku).one_or_none()

            if existing is not None:
                if not existing.is_deleted:
                    logger.warning("Product create rejected, SKU exists", extra={"sku": request.sku})
                    raise ConflictError("Product already exists with this SKU", sku=request.sku)

                ProductService._restore(db, existing)
                changes = request.model_dump(exclude_unset=True, exclude={"sku", "in_stock"})
                changes["user_id"] = acting_user_id
                ProductService._apply_changes(db, existing, changes)
                logger.info(
                    "Product restored from soft delete",
                    extra={"product_id": existing.id, "sku": existing.sku}
                )
                return existing

            data = request.model_dump(exclude={"website_ids"})
            ProductService._load_parents(db, data)
            websites = ProductService._load_websites(db, request.website_ids)

            product = Product(
                **data,
                slug=derive_slug(request.name),
                version=1,
                user_id=acting_user_id,
            )
            product.websites = websites
            ProductService._check_sub_category(db, product)

            db.add(product)
            db.flush()
            CounterLedger.apply(db, parent_contributions(product), +1)

            if product.in_stock:
                # opening balance
                db.add(InventoryChange(
                    product_id=product.id,
                    change_amount=product.in_stock,
                    stock_after=product.in_stock,
                    reason="increment"
                ))

        logger.info(
            "Product created",
            extra={"product_id": product.id, "sku": product.sku, "user_id": acting_user_id}
        )
        return product

    @staticmethod
    def update_product(db: Session, product_id: int, request: ProductUpdate) -> Product:
        with transaction(db):
            product = ProductService.get_product(db, product_id)
            changed = ProductService._apply_changes(db, product, request.model_dump(exclude_unset=True))

        if changed:
            logger.info("Product updated", extra={"product_id": product_id})
        return product

    @staticmethod
    def soft_delete_product(db: Session, product_id: int) -> None:
        with transaction(db):
            product = ProductService.get_product(db, product_id)
            contributions = parent_contributions(product)
            product.mark_deleted()
            product.version += 1
            db.flush()
            CounterLedger.apply(db, contributions, -1)

        logger.info("Product soft deleted", extra={"product_id": product_id})

    @staticmethod
    def restore_product(db: Session, product_id: int) -> Product:
        """Undo a soft delete; every current parent counter gains the product back."""
        with transaction(db):
            product = ProductService.get_product(db, product_id, include_deleted=True)
            if not product.is_deleted:
                raise ConflictError("Product is not deleted", product_id=product_id)
            ProductService._restore(db, product)

        logger.info("Product restored", extra={"product_id": product_id})
        return product
