from typing import Sequence

import structlog
from sqlalchemy.orm import Session

from backoffice.db.models import Product
from backoffice.db.session import unit_of_work
from backoffice.exceptions import NotFoundError, ValidationFailure
from backoffice.repositories.products import ProductRepository
from backoffice.repositories.suppliers import SupplierRepository
from backoffice.schemas import ProductIn

logger = structlog.get_logger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.suppliers = SupplierRepository(db)

    def list(self) -> Sequence[Product]:
        return self.products.find_all()

    def get(self, product_id: int) -> Product:
        product = self.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def search(self, name: str) -> Sequence[Product]:
        return self.products.find_by_name_containing_ignore_case(name)

    def by_supplier(self, supplier_id: int) -> Sequence[Product]:
        return self.products.find_by_supplier_id(supplier_id)

    def low_stock(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> Sequence[Product]:
        return self.products.find_by_stock_quantity_less_than(threshold)

    def create(self, data: ProductIn) -> Product:
        self._require_supplier(data.supplier_id)
        with unit_of_work(self.db):
            product = self.products.save(Product(**data.model_dump()))
        logger.info("product_created", id=product.id, supplier_id=product.supplier_id)
        return product

    def update(self, product_id: int, data: ProductIn) -> Product:
        with unit_of_work(self.db):
            product = self.get(product_id)
            self._require_supplier(data.supplier_id)
            for field, value in data.model_dump().items():
                setattr(product, field, value)
            self.products.save(product)
        return product

    def delete(self, product_id: int) -> None:
        # line items referencing the product are not checked here; an
        # enforcing store rejects the delete with a foreign key violation
        with unit_of_work(self.db):
            self.products.delete(self.get(product_id))
        logger.info("product_deleted", id=product_id)

    def _require_supplier(self, supplier_id) -> None:
        if supplier_id is not None and not self.suppliers.exists_by_id(supplier_id):
            raise ValidationFailure(f"Supplier {supplier_id} does not exist", fields=["supplier_id"])
