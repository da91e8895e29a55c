"""
Customers and suppliers.

Both own exactly one address and are referenced by other aggregates they
do not own (sales for customers, products for suppliers). Ownership of the
address is kept here as explicit transaction scripts: the owner row and its
address are written and deleted together inside one unit of work.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, Sequence, Type, TypeVar

import structlog
from sqlalchemy.orm import Session

from backoffice.config import DeletePolicy
from backoffice.db.models import Address, Customer, Product, Sale, Supplier
from backoffice.db.session import unit_of_work
from backoffice.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    ReferentialIntegrityViolation,
    ValidationFailure,
)
from backoffice.repositories.addresses import AddressRepository
from backoffice.repositories.customers import CustomerRepository
from backoffice.repositories.products import ProductRepository
from backoffice.repositories.sales import SaleRepository
from backoffice.repositories.suppliers import SupplierRepository
from backoffice.schemas import AddressIn, PartyIn

logger = structlog.get_logger(__name__)

OwnerT = TypeVar("OwnerT", Customer, Supplier)


class AddressOwnerService(ABC, Generic[OwnerT]):
    """CRUD for an entity that owns a single address."""

    model: Type[OwnerT]
    repository_class: type

    def __init__(self, db: Session, policy: DeletePolicy = DeletePolicy.PERMISSIVE):
        self.db = db
        self.policy = policy
        self.owners = self.repository_class(db)
        self.addresses = AddressRepository(db)

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def list(self) -> Sequence[OwnerT]:
        return self.owners.find_all()

    def get(self, owner_id: int) -> OwnerT:
        owner = self.owners.find_by_id(owner_id)
        if owner is None:
            raise NotFoundError(self.entity_name, owner_id)
        return owner

    def get_by_tax_id(self, tax_id: str) -> OwnerT:
        owner = self.owners.find_by_tax_id(tax_id)
        if owner is None:
            raise NotFoundError(self.entity_name, tax_id)
        return owner

    def create(self, data: PartyIn) -> OwnerT:
        # check-then-insert is not atomic; a concurrent insert still ends up
        # as DuplicateKeyError through the unique constraint on flush
        if self.owners.exists_by_tax_id(data.tax_id):
            logger.warning("duplicate_tax_id", entity=self.entity_name, tax_id=data.tax_id)
            raise DuplicateKeyError(self.entity_name, "tax_id", data.tax_id)

        with unit_of_work(self.db):
            owner = self.model(**data.model_dump(exclude={"address"}))
            if data.address is not None:
                address = self.addresses.save(Address(**data.address.model_dump()))
                owner.address_id = address.id
            self.owners.save(owner)

        logger.info(
            "owner_created",
            entity=self.entity_name,
            id=owner.id,
            address_id=owner.address_id,
        )
        return owner

    def update(self, owner_id: int, data: PartyIn) -> OwnerT:
        """
        Replace the owner's fields with ``data``.

        An address in the payload is written over the owned one (or created);
        a payload without address detaches the current one, which is then
        deleted as an orphan.
        """
        with unit_of_work(self.db):
            owner = self.get(owner_id)
            for field, value in data.model_dump(exclude={"address"}).items():
                setattr(owner, field, value)
            orphan = self._replace_address(owner, data.address)
            self.owners.save(owner)
            if orphan is not None:
                self.addresses.delete(orphan)
                logger.info("orphan_address_removed", entity=self.entity_name, address_id=orphan.id)
        return owner

    def delete(self, owner_id: int) -> None:
        with unit_of_work(self.db):
            owner = self.get(owner_id)
            if self.policy is DeletePolicy.RESTRICT:
                dependents = self.dependents_of(owner.id)
                if dependents:
                    logger.warning(
                        "owner_delete_refused",
                        entity=self.entity_name,
                        id=owner.id,
                        dependents=len(dependents),
                    )
                    raise ReferentialIntegrityViolation(
                        f"{self.entity_name} {owner.id} still has {len(dependents)} dependent record(s)",
                        details={"entity": self.entity_name, "id": owner.id, "dependents": len(dependents)},
                    )
            address_id = owner.address_id
            self.owners.delete(owner)
            if address_id is not None:
                self.addresses.delete_by_id(address_id)

        logger.info("owner_deleted", entity=self.entity_name, id=owner_id, address_id=address_id)

    @abstractmethod
    def dependents_of(self, owner_id: int) -> Sequence:
        """Rows that reference the owner and block a restricted delete."""

    def _replace_address(self, owner: OwnerT, data: Optional[AddressIn]) -> Optional[Address]:
        current = self.addresses.find_by_id(owner.address_id) if owner.address_id else None
        if data is None:
            owner.address_id = None
            return current
        if current is None:
            current = Address()
        for field, value in data.model_dump().items():
            setattr(current, field, value)
        owner.address_id = self.addresses.save(current).id
        return None


class CustomerService(AddressOwnerService[Customer]):
    model = Customer
    repository_class = CustomerRepository

    def __init__(self, db: Session, policy: DeletePolicy = DeletePolicy.PERMISSIVE):
        super().__init__(db, policy)
        self.sales = SaleRepository(db)

    def dependents_of(self, owner_id: int) -> Sequence[Sale]:
        return self.sales.find_by_customer_id(owner_id)

    def sales_of(self, customer_id: int) -> Sequence[Sale]:
        self.get(customer_id)
        return self.sales.find_by_customer_id(customer_id)

    def add_sale(self, customer_id: int, sale_id: int) -> Sale:
        """Point ``sale`` at this customer, taking it from its previous one."""
        with unit_of_work(self.db):
            self.get(customer_id)
            sale = self.sales.find_by_id(sale_id)
            if sale is None:
                raise NotFoundError("Sale", sale_id)
            sale.customer_id = customer_id
            self.sales.save(sale)
        logger.info("sale_reassigned", sale_id=sale_id, customer_id=customer_id)
        return sale

    def remove_sale(self, customer_id: int, sale_id: int) -> None:
        sale = self.sales.find_by_id(sale_id)
        if sale is None or sale.customer_id != customer_id:
            raise NotFoundError("Sale", sale_id)
        raise ValidationFailure(
            "A sale cannot exist without a customer; assign it to another customer instead",
            fields=["customer_id"],
        )


class SupplierService(AddressOwnerService[Supplier]):
    model = Supplier
    repository_class = SupplierRepository

    def __init__(self, db: Session, policy: DeletePolicy = DeletePolicy.PERMISSIVE):
        super().__init__(db, policy)
        self.products = ProductRepository(db)

    def dependents_of(self, owner_id: int) -> Sequence[Product]:
        return self.products.find_by_supplier_id(owner_id)

    def products_of(self, supplier_id: int) -> Sequence[Product]:
        self.get(supplier_id)
        return self.products.find_by_supplier_id(supplier_id)

    def add_product(self, supplier_id: int, product_id: int) -> Product:
        with unit_of_work(self.db):
            self.get(supplier_id)
            product = self._product(product_id)
            product.supplier_id = supplier_id
            self.products.save(product)
        logger.info("product_linked", product_id=product_id, supplier_id=supplier_id)
        return product

    def remove_product(self, supplier_id: int, product_id: int) -> Product:
        with unit_of_work(self.db):
            self.get(supplier_id)
            product = self._product(product_id)
            if product.supplier_id != supplier_id:
                raise NotFoundError("Product", product_id)
            product.supplier_id = None
            self.products.save(product)
        logger.info("product_unlinked", product_id=product_id, supplier_id=supplier_id)
        return product

    def _product(self, product_id: int) -> Product:
        product = self.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product
