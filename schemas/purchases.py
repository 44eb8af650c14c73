from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.purchases import MAX_QUANTITY

Currency = Literal["USD", "AED", "GBP"]
PurchaseStatus = Literal["pending", "completed", "cancelled"]
PaymentType = Literal["cash", "card", "bank_transfer", "cheque"]


class PurchaseCreate(BaseModel):
    currency: Currency
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    cost_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    # Derived from quantity and cost price; if sent it has to match
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    status: PurchaseStatus = "pending"
    vendor_id: int
    product_id: int
    invoice_number: Optional[str] = Field(default=None, max_length=20)
    payment_type: Optional[PaymentType] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    paid_at: Optional[datetime] = None


class PurchaseUpdate(BaseModel):
    currency: Optional[Currency] = None
    quantity: Optional[int] = Field(default=None, ge=1, le=MAX_QUANTITY)
    cost_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[PurchaseStatus] = None
    vendor_id: Optional[int] = None
    product_id: Optional[int] = None
    invoice_number: Optional[str] = Field(default=None, max_length=20)
    payment_type: Optional[PaymentType] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    paid_at: Optional[datetime] = None


class PurchaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: Optional[str]
    currency: str
    quantity: int
    cost_price: Decimal
    total_amount: Decimal
    status: str
    vendor_id: int
    product_id: int
    user_id: int
    payment_type: Optional[str]
    notes: Optional[str]
    paid_at: Optional[datetime]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
