from typing import Optional

from sqlalchemy import exists, select

from backoffice.db.models import Customer
from backoffice.repositories.base import SqlRepository


class CustomerRepository(SqlRepository[Customer]):
    model = Customer

    def find_by_tax_id(self, tax_id: str) -> Optional[Customer]:
        return self.db.scalar(select(Customer).where(Customer.tax_id == tax_id))

    def exists_by_tax_id(self, tax_id: str) -> bool:
        return self.db.scalar(select(exists().where(Customer.tax_id == tax_id)))
