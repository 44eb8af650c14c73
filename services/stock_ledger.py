from sqlalchemy import select, update
from sqlalchemy.orm import Session

from core.exceptions import InvariantViolation, NotFoundError
from models.inventory_changes import InventoryChange
from models.products import Product
from utils.logger import get_logger

logger = get_logger(__name__)


class StockLedger:
    """
    Applies signed stock movements to Product.in_stock.

    The movement is one conditional statement
    ("in_stock = in_stock + delta WHERE in_stock + delta >= 0"), so two
    concurrent purchases against the same product both land. Every movement
    bumps the product version and is recorded as an InventoryChange.
    """

    @staticmethod
    def current_stock(db: Session, product_id: int) -> int | None:
        return db.scalar(select(Product.in_stock).where(Product.id == product_id))

    @staticmethod
    def apply_delta(db: Session, product_id: int, delta: int, purchase_id: int | None = None) -> int:
        """
        Move stock by delta and return the new stock level.

        Raises NotFoundError for an unknown product and InvariantViolation when
        the stock would go negative. Nothing is clamped.
        """
        if delta == 0:
            current = StockLedger.current_stock(db, product_id)
            if current is None:
                raise NotFoundError("Product not found", product_id=product_id)
            return current

        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.in_stock + delta >= 0)
            .values(in_stock=Product.in_stock + delta, version=Product.version + 1)
        )

        if result.rowcount != 1:
            current = StockLedger.current_stock(db, product_id)
            if current is None:
                raise NotFoundError("Product not found", product_id=product_id)
            logger.error(
                "Stock movement rejected",
                extra={"product_id": product_id, "in_stock": current,
                       "delta": delta, "purchase_id": purchase_id}
            )
            raise InvariantViolation(
                "Stock cannot be negative",
                product_id=product_id, in_stock=current, delta=delta, purchase_id=purchase_id
            )

        new_stock = StockLedger.current_stock(db, product_id)
        db.add(InventoryChange(
            product_id=product_id,
            purchase_id=purchase_id,
            change_amount=delta,
            stock_after=new_stock,
            reason="increment" if delta > 0 else "decrement"
        ))

        logger.debug(
            "Stock adjusted",
            extra={"product_id": product_id, "delta": delta,
                   "in_stock": new_stock, "purchase_id": purchase_id}
        )
        return new_stock
