from typing import Optional, Sequence

from sqlalchemy import select

from backoffice.db.models import Address, Customer, Supplier
from backoffice.repositories.base import SqlRepository


class AddressRepository(SqlRepository[Address]):
    model = Address

    def find_by_postal_code(self, postal_code: str) -> Sequence[Address]:
        return self._find_where(Address.postal_code == postal_code)

    def find_by_city(self, city: str) -> Sequence[Address]:
        return self._find_where(Address.city == city)

    def find_by_state(self, state: str) -> Sequence[Address]:
        return self._find_where(Address.state == state)

    def find_by_city_and_state(self, city: str, state: str) -> Sequence[Address]:
        return self._find_where(Address.city == city, Address.state == state)

    def find_owner(self, address_id: int) -> Optional[Customer | Supplier]:
        """Customer or supplier holding ``address_id``, if any."""
        for owner_model in (Customer, Supplier):
            owner = self.db.scalar(select(owner_model).where(owner_model.address_id == address_id))
            if owner is not None:
                return owner
        return None
