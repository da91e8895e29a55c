from typing import Optional

from sqlalchemy import exists, select

from backoffice.db.models import Supplier
from backoffice.repositories.base import SqlRepository


class SupplierRepository(SqlRepository[Supplier]):
    model = Supplier

    def find_by_tax_id(self, tax_id: str) -> Optional[Supplier]:
        return self.db.scalar(select(Supplier).where(Supplier.tax_id == tax_id))

    def exists_by_tax_id(self, tax_id: str) -> bool:
        return self.db.scalar(select(exists().where(Supplier.tax_id == tax_id)))
