from core.database import Base
from sqlalchemy import (Column, Integer, String)
from sqlalchemy.orm import relationship
from .mixins import (CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin,
                     NamedEntityMixin, ProductCounterMixin)

class Website(Base, NamedEntityMixin, ProductCounterMixin, SoftDeleteMixin,
              CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "websites"
    __natural_key__ = ("url",)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    products = relationship("Product", secondary="product_websites", back_populates="websites")

    url = Column(String(500), unique=True, nullable=False)
