from typing import Sequence

from sqlalchemy import func

from backoffice.db.models import Product
from backoffice.repositories.base import SqlRepository


class ProductRepository(SqlRepository[Product]):
    model = Product

    def find_by_name_containing_ignore_case(self, term: str) -> Sequence[Product]:
        # LIKE wildcards in the term are matched literally
        escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return self._find_where(func.lower(Product.name).like(f"%{escaped}%", escape="\\"))

    def find_by_supplier_id(self, supplier_id: int) -> Sequence[Product]:
        return self._find_where(Product.supplier_id == supplier_id)

    def find_by_stock_quantity_less_than(self, threshold: int) -> Sequence[Product]:
        return self._find_where(Product.stock_quantity < threshold)
