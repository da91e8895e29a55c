from datetime import datetime
from typing import Sequence

from backoffice.db.models import Sale
from backoffice.repositories.base import SqlRepository


class SaleRepository(SqlRepository[Sale]):
    model = Sale

    def find_by_customer_id(self, customer_id: int) -> Sequence[Sale]:
        return self._find_where(Sale.customer_id == customer_id)

    def find_by_timestamp_between(self, start: datetime, end: datetime) -> Sequence[Sale]:
        """Sales with ``start <= timestamp <= end``."""
        return self._find_where(Sale.timestamp.between(start, end))
