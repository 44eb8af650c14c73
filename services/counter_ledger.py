"""
Denormalized product_count maintenance.

Every adjustment is a single "product_count = product_count + delta" statement
so concurrent requests touching the same parent never lose an update. The
caller owns the transaction: a failed adjustment raises and the whole unit of
work rolls back with it.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Mapping

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from core.exceptions import InvariantViolation
from models.brands import Brand
from models.catalogs import Catalog
from models.categories import Category
from models.products import Product, product_websites
from models.sub_categories import SubCategory
from models.vehicle_types import VehicleType
from models.websites import Website
from utils.logger import get_logger

logger = get_logger(__name__)


class ParentKind(str, enum.Enum):
    CATALOG = "catalog"
    CATEGORY = "category"
    SUB_CATEGORY = "sub_category"
    BRAND = "brand"
    VEHICLE_TYPE = "vehicle_type"
    WEBSITE = "website"


PARENT_MODELS = {
    ParentKind.CATALOG: Catalog,
    ParentKind.CATEGORY: Category,
    ParentKind.SUB_CATEGORY: SubCategory,
    ParentKind.BRAND: Brand,
    ParentKind.VEHICLE_TYPE: VehicleType,
    ParentKind.WEBSITE: Website,
}

# Single-valued associations; websites go through product_websites
PRODUCT_FOREIGN_KEYS = {
    ParentKind.CATALOG: "catalog_id",
    ParentKind.CATEGORY: "category_id",
    ParentKind.SUB_CATEGORY: "sub_category_id",
    ParentKind.BRAND: "brand_id",
    ParentKind.VEHICLE_TYPE: "vehicle_type_id",
}

Contributions = Mapping[ParentKind, Iterable[int]]


@dataclass
class CounterDrift:
    kind: ParentKind
    parent_id: int
    recorded: int
    actual: int


class CounterLedger:

    @staticmethod
    def adjust(db: Session, kind: ParentKind, parent_id: int | None, delta: int) -> None:
        """Add delta to one parent's product_count. A None parent is a no-op."""
        if parent_id is None:
            return
        CounterLedger.adjust_many(db, kind, [parent_id], delta)

    @staticmethod
    def adjust_many(db: Session, kind: ParentKind, parent_ids: Iterable[int | None], delta: int) -> None:
        """
        Add delta to every listed parent in one statement.

        Raises InvariantViolation when a parent row is missing or a counter
        would drop below zero (the latter means the counters have drifted).
        """
        ids = sorted({parent_id for parent_id in parent_ids if parent_id is not None})
        if not ids or delta == 0:
            return

        model = PARENT_MODELS[kind]
        stmt = (
            update(model)
            .where(model.id.in_(ids), model.product_count + delta >= 0)
            .values(product_count=model.product_count + delta)
        )
        result = db.execute(stmt)

        if result.rowcount != len(ids):
            found = set(db.scalars(select(model.id).where(model.id.in_(ids))))
            missing = sorted(set(ids) - found)
            logger.error(
                "Counter adjustment failed",
                extra={"kind": kind.value, "parent_ids": ids, "missing": missing, "delta": delta}
            )
            if missing:
                raise InvariantViolation(
                    f"Cannot adjust {kind.value} counter, parent rows missing",
                    kind=kind.value, parent_ids=missing, delta=delta
                )
            raise InvariantViolation(
                f"{kind.value} product count would become negative",
                kind=kind.value, parent_ids=ids, delta=delta
            )

        logger.debug(
            "Product counters adjusted",
            extra={"kind": kind.value, "parent_ids": ids, "delta": delta}
        )

    @staticmethod
    def apply(db: Session, contributions: Contributions, delta: int) -> None:
        for kind, parent_ids in contributions.items():
            CounterLedger.adjust_many(db, kind, parent_ids, delta)

    @staticmethod
    def apply_diff(db: Session, before: Contributions, after: Contributions) -> None:
        """
        Move counters from one association state to another.

        Parents only in `before` lose one, parents only in `after` gain one,
        parents in both are left alone. Decrements run first.
        """
        for kind in ParentKind:
            old = set(before.get(kind, ()))
            new = set(after.get(kind, ()))
            CounterLedger.adjust_many(db, kind, old - new, -1)
            CounterLedger.adjust_many(db, kind, new - old, +1)

    @staticmethod
    def live_counts(db: Session, kind: ParentKind) -> dict[int, int]:
        """Count live products per parent straight from the associations."""
        if kind is ParentKind.WEBSITE:
            column = product_websites.c.website_id
            stmt = (
                select(column, func.count())
                .join(Product, Product.id == product_websites.c.product_id)
                .where(Product.deleted_at.is_(None))
                .group_by(column)
            )
        else:
            column = getattr(Product, PRODUCT_FOREIGN_KEYS[kind])
            stmt = (
                select(column, func.count(Product.id))
                .where(Product.deleted_at.is_(None), column.is_not(None))
                .group_by(column)
            )
        return {parent_id: count for parent_id, count in db.execute(stmt)}

    @staticmethod
    def reconcile(db: Session, fix: bool = False) -> list[CounterDrift]:
        """
        Compare every recorded product_count with the live association count.

        With fix=True drifted rows are overwritten with the actual count; the
        caller commits.
        """
        drifts: list[CounterDrift] = []
        for kind, model in PARENT_MODELS.items():
            actual = CounterLedger.live_counts(db, kind)
            for parent_id, recorded in db.execute(select(model.id, model.product_count)):
                expected = actual.get(parent_id, 0)
                if recorded != expected:
                    drifts.append(CounterDrift(kind, parent_id, recorded, expected))

        for drift in drifts:
            logger.warning(
                "Product counter drift detected",
                extra={"kind": drift.kind.value, "parent_id": drift.parent_id,
                       "recorded": drift.recorded, "actual": drift.actual, "fixed": fix}
            )
            if fix:
                model = PARENT_MODELS[drift.kind]
                db.execute(
                    update(model)
                    .where(model.id == drift.parent_id)
                    .values(product_count=drift.actual)
                )

        return drifts
