from core.database import Base
from sqlalchemy import (Column, Integer, String)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin, SoftDeleteMixin

class Vendor(Base, SoftDeleteMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "vendors"
    __natural_key__ = ("email",)

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    purchases = relationship("Purchase", back_populates="vendor")

    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False)
    company_name = Column(String(255))
    city = Column(String(100))
    country = Column(String(100))
