import random
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.products import Product
from models.purchases import Purchase
from models.vendors import Vendor
from schemas.purchases import PurchaseCreate, PurchaseUpdate
from services.stock_ledger import StockLedger
from utils.logger import get_logger

logger = get_logger(__name__)

COMPLETED = "completed"

# Columns a partial update may not set to null
REQUIRED_FIELDS = {"currency", "quantity", "cost_price", "status", "vendor_id", "product_id"}

STOCK_FIELDS = {"status", "quantity", "product_id"}

TOP_VENDORS = 5


class StockPosition(NamedTuple):
    """The part of a purchase that decides its effect on stock."""
    product_id: int
    status: str
    quantity: int


def compute_total(quantity: int, cost_price) -> Decimal:
    total = Decimal(quantity) * Decimal(str(cost_price))
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def generate_invoice_number() -> str:
    return f"LTS-{random.randint(1000, 9999)}"


def stock_movements(previous: StockPosition | None, current: StockPosition | None) -> list[tuple[int, int]]:
    """
    Signed (product_id, delta) movements taking stock from one purchase state
    to another. None stands for "no purchase" (before create, after delete).

    Only completed purchases hold stock, so the movement depends on whether the
    purchase was and is completed, never on the exact transition.
    """
    was_held = previous is not None and previous.status == COMPLETED
    is_held = current is not None and current.status == COMPLETED

    if previous is not None and current is not None and previous.product_id == current.product_id:
        if was_held and is_held:
            delta = current.quantity - previous.quantity
        elif is_held:
            delta = current.quantity
        elif was_held:
            delta = -previous.quantity
        else:
            delta = 0
        return [(current.product_id, delta)] if delta else []

    # Different products (or create/delete): reverse on the old, apply on the new
    movements = []
    if was_held:
        movements.append((previous.product_id, -previous.quantity))
    if is_held:
        movements.append((current.product_id, current.quantity))
    return movements


def _position(purchase: Purchase) -> StockPosition:
    return StockPosition(purchase.product_id, purchase.status, purchase.quantity)


class PurchaseService:

    @staticmethod
    def _require_product(db: Session, product_id: int) -> Product:
        product = db.get(Product, product_id)
        if product is None or product.is_deleted:
            raise NotFoundError(f"Product {product_id} not found", product_id=product_id)
        return product

    @staticmethod
    def _require_vendor(db: Session, vendor_id: int) -> Vendor:
        vendor = db.get(Vendor, vendor_id)
        if vendor is None or vendor.is_deleted:
            raise NotFoundError("Vendor not found", vendor_id=vendor_id)
        return vendor

    @staticmethod
    def _apply_total(purchase: Purchase, supplied_total):
        """Recompute total_amount; a client supplied total has to agree with it."""
        total = compute_total(purchase.quantity, purchase.cost_price)
        if supplied_total is not None and Decimal(str(supplied_total)) != total:
            logger.warning(
                "Purchase total mismatch",
                extra={"purchase_id": purchase.id, "supplied": str(supplied_total),
                       "computed": str(total)}
            )
            raise ConflictError(
                "Total amount must equal quantity x cost price",
                supplied=str(supplied_total), computed=str(total)
            )
        purchase.total_amount = total

    @staticmethod
    def _move_stock(db: Session, purchase_id: int, previous, current):
        for product_id, delta in stock_movements(previous, current):
            StockLedger.apply_delta(db, product_id, delta, purchase_id=purchase_id)

    @staticmethod
    def get_purchase(db: Session, purchase_id: int) -> Purchase:
        purchase = db.get(Purchase, purchase_id)
        if purchase is None:
            raise NotFoundError("Purchase not found", purchase_id=purchase_id)
        return purchase

    @staticmethod
    def list_purchases(db: Session, offset: int = 0, limit: int = 10):
        count = db.scalar(select(func.count(Purchase.id)))
        rows = db.scalars(
            select(Purchase)
            .order_by(Purchase.created_at.desc(), Purchase.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return rows, count

    @staticmethod
    def create_purchase(db: Session, request: PurchaseCreate, acting_user_id: int) -> Purchase:
        with transaction(db):
            data = request.model_dump(exclude={"total_amount"})
            PurchaseService._require_product(db, request.product_id)
            PurchaseService._require_vendor(db, request.vendor_id)

            purchase = Purchase(**data, user_id=acting_user_id)
            if not purchase.invoice_number:
                purchase.invoice_number = generate_invoice_number()
            PurchaseService._apply_total(purchase, request.total_amount)

            db.add(purchase)
            db.flush()
            PurchaseService._move_stock(db, purchase.id, None, _position(purchase))

        logger.info(
            "Purchase created",
            extra={"purchase_id": purchase.id, "product_id": purchase.product_id,
                   "status": purchase.status, "quantity": purchase.quantity}
        )
        return purchase

    @staticmethod
    def update_purchase(db: Session, purchase_id: int, request: PurchaseUpdate) -> Purchase:
        changes = request.model_dump(exclude_unset=True)
        supplied_total = changes.pop("total_amount", None)

        nulled = sorted(field for field in REQUIRED_FIELDS if field in changes and changes[field] is None)
        if nulled:
            raise ValidationError(f"{', '.join(nulled)} cannot be null")

        with transaction(db):
            purchase = PurchaseService.get_purchase(db, purchase_id)
            previous = _position(purchase)

            # Any change that can move stock needs a live product to move it on
            if STOCK_FIELDS & changes.keys():
                PurchaseService._require_product(db, changes.get("product_id", purchase.product_id))
            if changes.get("vendor_id", purchase.vendor_id) != purchase.vendor_id:
                PurchaseService._require_vendor(db, changes["vendor_id"])

            for field, value in changes.items():
                setattr(purchase, field, value)
            PurchaseService._apply_total(purchase, supplied_total)

            db.flush()
            PurchaseService._move_stock(db, purchase.id, previous, _position(purchase))

        logger.info(
            "Purchase updated",
            extra={"purchase_id": purchase_id, "previous_status": previous.status,
                   "status": purchase.status}
        )
        return purchase

    @staticmethod
    def delete_purchase(db: Session, purchase_id: int) -> None:
        with transaction(db):
            purchase = PurchaseService.get_purchase(db, purchase_id)
            PurchaseService._move_stock(db, purchase.id, _position(purchase), None)
            db.delete(purchase)

        logger.info("Purchase deleted", extra={"purchase_id": purchase_id})

    @staticmethod
    def analytics(db: Session, start_date: datetime | None = None, end_date: datetime | None = None) -> dict:
        conditions = []
        if start_date:
            conditions.append(Purchase.created_at >= start_date)
        if end_date:
            conditions.append(Purchase.created_at <= end_date)

        total_purchases, total_amount = db.execute(
            select(func.count(Purchase.id), func.coalesce(func.sum(Purchase.total_amount), 0))
            .where(*conditions)
        ).one()

        status_distribution = dict(db.execute(
            select(Purchase.status, func.count(Purchase.id))
            .where(*conditions)
            .group_by(Purchase.status)
        ).all())

        currency_distribution = {
            currency: {"count": count, "total": float(total or 0)}
            for currency, count, total in db.execute(
                select(Purchase.currency, func.count(Purchase.id), func.sum(Purchase.total_amount))
                .where(*conditions)
                .group_by(Purchase.currency)
            )
        }

        payment_types = dict(db.execute(
            select(Purchase.payment_type, func.count(Purchase.id))
            .where(*conditions, Purchase.payment_type.is_not(None))
            .group_by(Purchase.payment_type)
        ).all())

        total_spent = func.sum(Purchase.total_amount)
        vendor_distribution = [
            {
                "vendor_id": vendor.id,
                "vendor_name": vendor.company_name or f"{vendor.first_name} {vendor.last_name}",
                "purchase_count": purchase_count,
                "total_spent": float(spent or 0),
            }
            for vendor, purchase_count, spent in db.execute(
                select(Vendor, func.count(Purchase.id), total_spent)
                .join(Purchase, Purchase.vendor_id == Vendor.id)
                .where(*conditions)
                .group_by(Vendor.id)
                .order_by(total_spent.desc(), Vendor.id)
                .limit(TOP_VENDORS)
            )
        ]

        completed = status_distribution.get(COMPLETED, 0)
        pending = status_distribution.get("pending", 0)
        completion_rate = round(completed / (completed + pending) * 100, 2) if completed + pending else 0

        return {
            "total_purchases": total_purchases,
            "total_amount": float(total_amount),
            "completed_purchases": completed,
            "pending_purchases": pending,
            "completion_rate": completion_rate,
            "status_distribution": status_distribution,
            "payment_types": payment_types,
            "currency_distribution": currency_distribution,
            "vendor_distribution": vendor_distribution,
        }
