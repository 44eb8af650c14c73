from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import ConflictError, NotFoundError
from utils.logger import get_logger, sanitize_log_data
from utils.slug import derive_slug, slug_base

logger = get_logger(__name__)


class ReferenceService:
    """
    CRUD for the entities products point at (catalogs, categories, brands...).

    Creation follows restore-or-create on the model's __natural_key__: a
    soft-deleted row with the same key is restored and overwritten with the
    new payload, a live one is a conflict, otherwise a fresh row is inserted.
    """

    def __init__(self, model, label: str, parents: dict[str, tuple[Any, str]] | None = None):
        self.model = model
        self.label = label
        # foreign key column -> (parent model, parent label)
        self.parents = parents or {}

    def _derive_identity(self, data: dict) -> dict:
        if data.get("name"):
            data["name_key"] = slug_base(data["name"])
            data["slug"] = derive_slug(data["name"])
        return data

    def _check_parents(self, db: Session, data: dict):
        for column, (parent_model, parent_label) in self.parents.items():
            parent_id = data.get(column)
            if parent_id is None:
                continue
            parent = db.get(parent_model, parent_id)
            if parent is None or parent.is_deleted:
                raise NotFoundError(f"{parent_label} not found", **{column: parent_id})

    def _natural_key(self, data: dict) -> dict:
        return {column: data.get(column) for column in self.model.__natural_key__}

    def get(self, db: Session, entity_id: int, include_deleted: bool = False):
        entity = db.get(self.model, entity_id)
        if entity is None or (entity.is_deleted and not include_deleted):
            raise NotFoundError(f"{self.label} not found", id=entity_id)
        return entity

    def list(self, db: Session, offset: int = 0, limit: int = 10):
        live = self.model.deleted_at.is_(None)
        count = db.scalar(select(func.count(self.model.id)).where(live))
        rows = db.scalars(
            select(self.model)
            .where(live)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return rows, count

    def create(self, db: Session, data: dict):
        """Returns (entity, restored)."""
        data = self._derive_identity(dict(data))

        with transaction(db):
            self._check_parents(db, data)
            existing = db.query(self.model).filter_by(**self._natural_key(data)).one_or_none()

            if existing is not None:
                if not existing.is_deleted:
                    logger.warning(
                        f"{self.label} create rejected, already exists",
                        extra=sanitize_log_data(self._natural_key(data))
                    )
                    raise ConflictError(f"{self.label} already exists with this name")

                existing.mark_restored()
                for field, value in data.items():
                    setattr(existing, field, value)
                db.flush()
                logger.info(
                    f"{self.label} restored from soft delete",
                    extra={"id": existing.id}
                )
                return existing, True

            entity = self.model(**data)
            db.add(entity)
            db.flush()

        logger.info(f"{self.label} created", extra={"id": entity.id})
        return entity, False

    def update(self, db: Session, entity_id: int, data: dict):
        with transaction(db):
            entity = self.get(db, entity_id)
            if data.get("name") and data["name"] != entity.name:
                data = self._derive_identity(dict(data))
            else:
                data.pop("name", None)
            self._check_parents(db, data)

            for field, value in data.items():
                setattr(entity, field, value)
            db.flush()

        return entity

    def soft_delete(self, db: Session, entity_id: int):
        with transaction(db):
            entity = self.get(db, entity_id)
            entity.mark_deleted()
        logger.info(f"{self.label} soft deleted", extra={"id": entity_id})

    def restore(self, db: Session, entity_id: int):
        with transaction(db):
            entity = self.get(db, entity_id, include_deleted=True)
            if not entity.is_deleted:
                raise ConflictError(f"{self.label} is not deleted")
            entity.mark_restored()
        logger.info(f"{self.label} restored", extra={"id": entity_id})
        return entity
