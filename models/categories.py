from core.database import Base
from sqlalchemy import (Column, Integer, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import (CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin,
                     NamedEntityMixin, ProductCounterMixin)

class Category(Base, NamedEntityMixin, ProductCounterMixin, SoftDeleteMixin,
               CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "categories"
    __natural_key__ = ("name_key",)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    products = relationship("Product", back_populates="category")
    sub_categories = relationship("SubCategory", back_populates="category")

    __table_args__ = (UniqueConstraint("name_key", name="uq_categories_name_key"),)
