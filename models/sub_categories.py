from core.database import Base
from sqlalchemy import (Column, Integer, ForeignKey, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import (CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin,
                     NamedEntityMixin, ProductCounterMixin)

class SubCategory(Base, NamedEntityMixin, ProductCounterMixin, SoftDeleteMixin,
                  CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "sub_categories"
    # Names only need to be unique within their category
    __natural_key__ = ("category_id", "name_key")

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    #relationships
    category = relationship("Category", back_populates="sub_categories")
    products = relationship("Product", back_populates="sub_category")

    __table_args__ = (
        UniqueConstraint("category_id", "name_key", name="uq_sub_categories_category_name_key"),
    )
