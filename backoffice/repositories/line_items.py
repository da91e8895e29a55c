from typing import Sequence

from backoffice.db.models import LineItem
from backoffice.repositories.base import SqlRepository


class LineItemRepository(SqlRepository[LineItem]):
    model = LineItem

    def find_by_sale_id(self, sale_id: int) -> Sequence[LineItem]:
        return self._find_where(LineItem.sale_id == sale_id)

    def find_by_product_id(self, product_id: int) -> Sequence[LineItem]:
        return self._find_where(LineItem.product_id == product_id)

    def delete_by_sale_id(self, sale_id: int) -> int:
        return self._delete_where(LineItem.sale_id == sale_id)
