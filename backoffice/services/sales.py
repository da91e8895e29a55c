"""
Sales and their line items.

A sale is the aggregate root of its line items: items are paired to the
sale when added, orphan-removed when dropped from it, and deleted before
the sale row when the sale goes away. The sale total is whatever the
caller supplied; only the per-item subtotal is derived.
"""

from datetime import datetime
from typing import Iterable, Sequence

import structlog
from sqlalchemy.orm import Session

from backoffice.db.models import LineItem, Sale
from backoffice.db.session import unit_of_work
from backoffice.exceptions import NotFoundError, ValidationFailure
from backoffice.repositories.customers import CustomerRepository
from backoffice.repositories.line_items import LineItemRepository
from backoffice.repositories.products import ProductRepository
from backoffice.repositories.sales import SaleRepository
from backoffice.schemas import LineItemIn, SaleIn, SaleItemIn

logger = structlog.get_logger(__name__)


class _References:
    """Existence checks shared by the sale and line item services."""

    def __init__(self, db: Session):
        self.db = db
        self.sales = SaleRepository(db)
        self.items = LineItemRepository(db)
        self.customers = CustomerRepository(db)
        self.products = ProductRepository(db)

    def _require_customer(self, customer_id: int) -> None:
        if not self.customers.exists_by_id(customer_id):
            raise ValidationFailure(f"Customer {customer_id} does not exist", fields=["customer_id"])

    def _require_products(self, product_ids: Iterable[int]) -> None:
        unknown = sorted({pid for pid in product_ids if not self.products.exists_by_id(pid)})
        if unknown:
            raise ValidationFailure(
                f"Unknown product(s): {', '.join(map(str, unknown))}", fields=["product_id"]
            )


class SaleService(_References):
    def list(self) -> Sequence[Sale]:
        return self.sales.find_all()

    def get(self, sale_id: int) -> Sale:
        sale = self.sales.find_by_id(sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)
        return sale

    def by_customer(self, customer_id: int) -> Sequence[Sale]:
        return self.sales.find_by_customer_id(customer_id)

    def between(self, start: datetime, end: datetime) -> Sequence[Sale]:
        return self.sales.find_by_timestamp_between(start, end)

    def create(self, data: SaleIn) -> Sale:
        self._require_customer(data.customer_id)
        self._require_products(item.product_id for item in data.items)

        with unit_of_work(self.db):
            sale = self.sales.save(
                Sale(
                    customer_id=data.customer_id,
                    total_amount=data.total_amount,
                    timestamp=data.timestamp,
                )
            )
            for item in data.items:
                self._pair(sale, self._new_item(item))

        logger.info("sale_created", id=sale.id, customer_id=sale.customer_id, items=len(data.items))
        return sale

    def update(self, sale_id: int, data: SaleIn) -> Sale:
        """
        Overwrite the sale header and replace its item list.

        Items carrying an id are updated in place, items without one are
        added, and items of the sale missing from ``data.items`` are removed.
        The timestamp only changes when one is supplied.
        """
        with unit_of_work(self.db):
            sale = self.get(sale_id)
            self._require_customer(data.customer_id)
            self._require_products(item.product_id for item in data.items)

            sale.customer_id = data.customer_id
            sale.total_amount = data.total_amount
            if data.timestamp is not None:
                sale.timestamp = data.timestamp
            self.sales.save(sale)

            current = {item.id: item for item in self.items.find_by_sale_id(sale.id)}
            for item_data in data.items:
                if item_data.id is None:
                    self._pair(sale, self._new_item(item_data))
                    continue
                item = current.pop(item_data.id, None)
                if item is None:
                    raise ValidationFailure(
                        f"LineItem {item_data.id} does not belong to Sale {sale.id}", fields=["items"]
                    )
                item.product_id = item_data.product_id
                item.quantity = item_data.quantity
                item.unit_price = item_data.unit_price
                self.items.save(item)
            for orphan in current.values():
                self.items.delete(orphan)

        if current:
            logger.info("orphan_items_removed", sale_id=sale_id, removed=sorted(current))
        return sale

    def delete(self, sale_id: int) -> None:
        with unit_of_work(self.db):
            sale = self.get(sale_id)
            removed = self.items.delete_by_sale_id(sale.id)
            self.sales.delete(sale)
        logger.info("sale_deleted", id=sale_id, items_removed=removed)

    def add_line_item(self, sale_id: int, data: SaleItemIn) -> LineItem:
        with unit_of_work(self.db):
            sale = self.get(sale_id)
            self._require_products([data.product_id])
            item = self._pair(sale, self._new_item(data))
        return item

    def remove_line_item(self, sale_id: int, item_id: int) -> None:
        with unit_of_work(self.db):
            self.get(sale_id)
            item = self.items.find_by_id(item_id)
            if item is None or item.sale_id != sale_id:
                raise NotFoundError("LineItem", item_id)
            self.items.delete(item)
        logger.info("line_item_removed", sale_id=sale_id, item_id=item_id)

    def _pair(self, sale: Sale, item: LineItem) -> LineItem:
        item.sale_id = sale.id
        return self.items.save(item)

    @staticmethod
    def _new_item(data: SaleItemIn) -> LineItem:
        return LineItem(product_id=data.product_id, quantity=data.quantity, unit_price=data.unit_price)


class LineItemService(_References):
    """Line items addressed directly rather than through their sale."""

    def list(self) -> Sequence[LineItem]:
        return self.items.find_all()

    def get(self, item_id: int) -> LineItem:
        item = self.items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("LineItem", item_id)
        return item

    def by_sale(self, sale_id: int) -> Sequence[LineItem]:
        return self.items.find_by_sale_id(sale_id)

    def by_product(self, product_id: int) -> Sequence[LineItem]:
        return self.items.find_by_product_id(product_id)

    def create(self, data: LineItemIn) -> LineItem:
        self._require_sale(data.sale_id)
        self._require_products([data.product_id])
        with unit_of_work(self.db):
            item = self.items.save(
                LineItem(
                    sale_id=data.sale_id,
                    product_id=data.product_id,
                    quantity=data.quantity,
                    unit_price=data.unit_price,
                )
            )
        return item

    def update(self, item_id: int, data: LineItemIn) -> LineItem:
        with unit_of_work(self.db):
            item = self.get(item_id)
            self._require_sale(data.sale_id)
            self._require_products([data.product_id])
            item.sale_id = data.sale_id
            item.product_id = data.product_id
            item.quantity = data.quantity
            item.unit_price = data.unit_price
            self.items.save(item)
        return item

    def delete(self, item_id: int) -> None:
        with unit_of_work(self.db):
            self.items.delete(self.get(item_id))

    def _require_sale(self, sale_id: int) -> None:
        if not self.sales.exists_by_id(sale_id):
            raise ValidationFailure(f"Sale {sale_id} does not exist", fields=["sale_id"])
