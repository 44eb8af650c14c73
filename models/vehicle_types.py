from core.database import Base
from sqlalchemy import (Column, Integer, UniqueConstraint)
from sqlalchemy.orm import relationship
from .mixins import (CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin,
                     NamedEntityMixin, ProductCounterMixin)

class VehicleType(Base, NamedEntityMixin, ProductCounterMixin, SoftDeleteMixin,
                  CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "vehicle_types"
    __natural_key__ = ("name_key",)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    products = relationship("Product", back_populates="vehicle_type")

    __table_args__ = (UniqueConstraint("name_key", name="uq_vehicle_types_name_key"),)
