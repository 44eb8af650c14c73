from datetime import datetime, timezone

from sqlalchemy.sql import func
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text


class CreatedAtMixin:
    created_at = Column(DateTime, default=func.now())

class UpdatedAtMixin:
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class SoftDeleteMixin:
    """Rows are marked with deleted_at instead of being removed."""
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self):
        self.deleted_at = datetime.now(timezone.utc)

    def mark_restored(self):
        self.deleted_at = None


class NamedEntityMixin:
    """
    Display name plus the two identifiers derived from it.

    name_key is deterministic and carries the unique constraint, slug is the
    cosmetic URL form with a random suffix.
    """
    name = Column(String(255), nullable=False)
    name_key = Column(String(255), nullable=False, index=True)
    slug = Column(String(300), index=True)
    description = Column(Text)
    status = Column(Boolean, default=True, nullable=False)


class ProductCounterMixin:
    # Number of live products referencing this row
    product_count = Column(Integer, default=0, server_default="0", nullable=False)
