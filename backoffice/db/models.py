from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, event
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

Money = Numeric(12, 2, asdecimal=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UtcDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC.

    Aware values are converted to UTC before binding, naive ones are taken
    as UTC already. Rows always come back aware, also on SQLite where the
    column itself keeps no offset.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)


class Base(DeclarativeBase):
    def missing_required(self) -> list[str]:
        """Names of NOT NULL columns that are still unset on this instance.

        Primary keys and columns flagged ``info={"derived": True}`` are filled
        at flush time and are not the caller's responsibility.
        """
        missing = []
        for column in self.__table__.columns:
            if column.nullable or column.primary_key or column.info.get("derived"):
                continue
            if column.default is not None or column.server_default is not None:
                continue
            if getattr(self, column.key) is None:
                missing.append(column.key)
        return missing


class Address(Base):
    __tablename__ = "addresses"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    street: Mapped[Optional[str]] = mapped_column(String(255))
    number: Mapped[Optional[str]] = mapped_column(String(20))
    complement: Mapped[Optional[str]] = mapped_column(String(100))
    district: Mapped[Optional[str]] = mapped_column(String(100))
    city: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), index=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(9), index=True)
    country: Mapped[str] = mapped_column(String(50), default="Brazil")

    def __init__(self, **kwargs):
        kwargs.setdefault("country", "Brazil")
        super().__init__(**kwargs)

    @property
    def full_address(self) -> str:
        text = self.street or ""
        if self.number is not None:
            text += f", {self.number}"
        if self.complement:
            text += f", {self.complement}"
        if self.district is not None:
            text += f" - {self.district}"
        if self.city is not None and self.state is not None:
            text += f" - {self.city}/{self.state}"
        if self.postal_code is not None:
            text += f" - CEP: {self.postal_code}"
        return text


class Customer(Base):
    __tablename__ = "customers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id: Mapped[str] = mapped_column(String(18), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(200))
    address_id: Mapped[Optional[int]] = mapped_column(ForeignKey("addresses.id"), unique=True)

    # read side only; ownership is maintained by the services
    address: Mapped[Optional[Address]] = relationship(viewonly=True)
    sales: Mapped[list["Sale"]] = relationship(viewonly=True, order_by="Sale.id")


class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id: Mapped[str] = mapped_column(String(18), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(200))
    address_id: Mapped[Optional[int]] = mapped_column(ForeignKey("addresses.id"), unique=True)

    address: Mapped[Optional[Address]] = relationship(viewonly=True)
    products: Mapped[list["Product"]] = relationship(viewonly=True, order_by="Product.id")


class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Optional[Decimal]] = mapped_column(Money)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    supplier_id: Mapped[Optional[int]] = mapped_column(ForeignKey("suppliers.id"), index=True)

    supplier: Mapped[Optional[Supplier]] = relationship(viewonly=True)


class Sale(Base):
    __tablename__ = "sales"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(
        UtcDateTime, nullable=False, index=True, info={"derived": True}
    )
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)

    customer: Mapped[Customer] = relationship(viewonly=True)
    items: Mapped[list["LineItem"]] = relationship(viewonly=True, order_by="LineItem.id")

    def stamp(self, now: Optional[datetime] = None) -> None:
        """Fill the timestamp once; an existing value is never touched."""
        if self.timestamp is None:
            self.timestamp = now or datetime.now(timezone.utc)


class LineItem(Base):
    __tablename__ = "line_items"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sale_id: Mapped[int] = mapped_column(ForeignKey("sales.id"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    subtotal: Mapped[Optional[Decimal]] = mapped_column(Money, info={"derived": True})

    sale: Mapped[Sale] = relationship(viewonly=True)
    product: Mapped[Product] = relationship(viewonly=True)

    def compute_subtotal(self) -> None:
        # unset inputs leave the subtotal alone: "not computable yet", not zero
        if self.quantity is not None and self.unit_price is not None:
            self.subtotal = Decimal(str(self.unit_price)) * self.quantity


@event.listens_for(LineItem, "before_insert")
@event.listens_for(LineItem, "before_update")
def _line_item_subtotal(mapper, connection, target: LineItem) -> None:
    target.compute_subtotal()


@event.listens_for(Sale, "before_insert")
def _sale_timestamp(mapper, connection, target: Sale) -> None:
    target.stamp()
