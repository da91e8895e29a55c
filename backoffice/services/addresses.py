from typing import Optional, Sequence

import structlog
from sqlalchemy.orm import Session

from backoffice.db.models import Address
from backoffice.db.session import unit_of_work
from backoffice.exceptions import NotFoundError, ReferentialIntegrityViolation
from backoffice.repositories.addresses import AddressRepository
from backoffice.schemas import AddressIn

logger = structlog.get_logger(__name__)


class AddressService:
    """Direct access to addresses; owned ones are normally managed through their owner."""

    def __init__(self, db: Session):
        self.db = db
        self.addresses = AddressRepository(db)

    def list(self) -> Sequence[Address]:
        return self.addresses.find_all()

    def get(self, address_id: int) -> Address:
        address = self.addresses.find_by_id(address_id)
        if address is None:
            raise NotFoundError("Address", address_id)
        return address

    def search(
        self,
        postal_code: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
    ) -> Sequence[Address]:
        if postal_code is not None:
            return self.addresses.find_by_postal_code(postal_code)
        if city is not None and state is not None:
            return self.addresses.find_by_city_and_state(city, state)
        if city is not None:
            return self.addresses.find_by_city(city)
        if state is not None:
            return self.addresses.find_by_state(state)
        return self.addresses.find_all()

    def create(self, data: AddressIn) -> Address:
        with unit_of_work(self.db):
            address = self.addresses.save(Address(**data.model_dump()))
        return address

    def update(self, address_id: int, data: AddressIn) -> Address:
        with unit_of_work(self.db):
            address = self.get(address_id)
            for field, value in data.model_dump().items():
                setattr(address, field, value)
            self.addresses.save(address)
        return address

    def delete(self, address_id: int) -> None:
        with unit_of_work(self.db):
            address = self.get(address_id)
            owner = self.addresses.find_owner(address_id)
            if owner is not None:
                owner_name = type(owner).__name__
                raise ReferentialIntegrityViolation(
                    f"Address {address_id} is owned by {owner_name} {owner.id}",
                    details={"owner": owner_name, "owner_id": owner.id},
                )
            self.addresses.delete(address)
        logger.info("address_deleted", id=address_id)
