from core.database import Base
from sqlalchemy import (Column, Integer, ForeignKey, Enum)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin

class InventoryChange(Base, CreatedAtMixin):
    """One stock movement applied to a product, kept for audit."""
    __tablename__ = "inventory_changes"

    #pk
    id = Column(Integer, primary_key=True, index=True)
    
    #fk
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id", ondelete="SET NULL"), nullable=True)
    
    #relationships
    product = relationship("Product", back_populates="inventory_changes")
    purchase = relationship("Purchase", back_populates="inventory_changes")

    change_amount = Column(Integer, nullable=False)
    stock_after = Column(Integer, nullable=False)
    reason = Column(Enum("increment", "decrement", name="reason"), nullable=False)
