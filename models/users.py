from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    #pk 
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    products = relationship("Product", back_populates="user")
    purchases = relationship("Purchase", back_populates="user")

    email = Column(String, unique=True, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    is_active = Column(Boolean, default=True)
    # admin, manager, staff or viewer, see core.permissions
    role = Column(String, default="viewer")
