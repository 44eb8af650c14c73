from core.database import Base
from sqlalchemy import (Column, Integer, String, ForeignKey, Numeric, Enum,
                        DateTime, CheckConstraint)
from sqlalchemy.orm import relationship
from .mixins import CreatedAtMixin, UpdatedAtMixin

PURCHASE_STATUSES = ("pending", "completed", "cancelled")
SUPPORTED_CURRENCIES = ("USD", "AED", "GBP")
PAYMENT_TYPES = ("cash", "card", "bank_transfer", "cheque")

MAX_QUANTITY = 999999


class Purchase(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "purchases"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    #relationships
    vendor = relationship("Vendor", back_populates="purchases")
    product = relationship("Product", back_populates="purchases")
    user = relationship("User", back_populates="purchases")
    inventory_changes = relationship("InventoryChange", back_populates="purchase", passive_deletes=True)

    invoice_number = Column(String(20))
    currency = Column(Enum(*SUPPORTED_CURRENCIES, name="purchase_currency"), nullable=False)
    quantity = Column(Integer, CheckConstraint(f"quantity >= 1 AND quantity <= {MAX_QUANTITY}"), nullable=False)
    cost_price = Column(Numeric(12, 2), CheckConstraint("cost_price >= 0"), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(Enum(*PURCHASE_STATUSES, name="purchase_status"), default="pending", nullable=False, index=True)
    payment_type = Column(Enum(*PAYMENT_TYPES, name="payment_type"))
    notes = Column(String(1000))
    paid_at = Column(DateTime(timezone=True))
