"""
Request and response models for the HTTP layer and the services.

Input models describe what a caller may send; output models are read
straight off the ORM rows (``from_attributes``).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AddressIn(BaseModel):
    street: Optional[str] = Field(default=None, max_length=255)
    number: Optional[str] = Field(default=None, max_length=20)
    complement: Optional[str] = Field(default=None, max_length=100)
    district: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=2)
    postal_code: Optional[str] = Field(default=None, max_length=9)
    country: str = Field(default="Brazil", max_length=50)


class AddressOut(AddressIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_address: str


class PartyIn(BaseModel):
    """Shared payload of customers and suppliers."""

    name: str = Field(..., min_length=1, max_length=200)
    tax_id: str = Field(..., min_length=1, max_length=18, examples=["11.111.111/0001-11"])
    phone: Optional[str] = Field(default=None, max_length=30)
    email: Optional[str] = Field(default=None, max_length=200)
    address: Optional[AddressIn] = None


class PartyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    tax_id: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[AddressOut] = None


class CustomerIn(PartyIn):
    pass


class CustomerOut(PartyOut):
    pass


class SupplierIn(PartyIn):
    pass


class SupplierOut(PartyOut):
    pass


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int
    supplier_id: Optional[int] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    stock_quantity: int
    supplier_id: Optional[int] = None


class SaleItemIn(BaseModel):
    """Line item embedded in a sale payload; ``id`` targets an existing item."""

    id: Optional[int] = None
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class LineItemIn(SaleItemIn):
    """Line item created on its own, outside a sale payload."""

    sale_id: int


class LineItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sale_id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Optional[Decimal] = None


class SaleIn(BaseModel):
    customer_id: int
    total_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    timestamp: Optional[datetime] = None
    items: list[SaleItemIn] = Field(default_factory=list)


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    timestamp: datetime
    total_amount: Decimal
    items: list[LineItemOut] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: dict = Field(default_factory=dict)
