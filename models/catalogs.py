from core.database import Base
from sqlalchemy import (Column, Integer, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import (CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin,
                     NamedEntityMixin, ProductCounterMixin)

class Catalog(Base, NamedEntityMixin, ProductCounterMixin, SoftDeleteMixin,
              CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "catalogs"
    __natural_key__ = ("name_key",)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    products = relationship("Product", back_populates="catalog")

    __table_args__ = (UniqueConstraint("name_key", name="uq_catalogs_name_key"),)
