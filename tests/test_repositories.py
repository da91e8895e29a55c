"""
Tests for repository layer.

Covers:
- Generic find/exists/save/delete behavior
- Required-field rejection before SQL is emitted
- Derived queries of every entity
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from backoffice.db.models import Address, Customer, LineItem, Product, Sale, Supplier
from backoffice.exceptions import DuplicateKeyError, ValidationFailure
from backoffice.repositories.addresses import AddressRepository
from backoffice.repositories.customers import CustomerRepository
from backoffice.repositories.line_items import LineItemRepository
from backoffice.repositories.products import ProductRepository
from backoffice.repositories.sales import SaleRepository
from backoffice.repositories.suppliers import SupplierRepository


@pytest.fixture
def customers(db_session):
    return CustomerRepository(db_session)


@pytest.fixture
def products(db_session):
    return ProductRepository(db_session)


class TestGenericRepository:
    def test_save_assigns_id(self, customers):
        saved = customers.save(Customer(name="Ana", tax_id="1"))
        assert saved.id is not None
        assert customers.exists_by_id(saved.id)

    def test_find_by_id_miss_returns_none(self, customers):
        assert customers.find_by_id(999) is None
        assert customers.exists_by_id(999) is False

    def test_delete_by_id(self, customers):
        saved = customers.save(Customer(name="Ana", tax_id="1"))
        assert customers.delete_by_id(saved.id) is True
        assert customers.find_by_id(saved.id) is None

    def test_delete_by_id_miss(self, customers):
        assert customers.delete_by_id(999) is False

    def test_find_all_ordered_by_id(self, customers):
        for i in range(3):
            customers.save(Customer(name=f"C{i}", tax_id=str(i)))
        assert [c.name for c in customers.find_all()] == ["C0", "C1", "C2"]

    def test_save_rejects_missing_required_fields(self, customers, db_session):
        with pytest.raises(ValidationFailure) as exc_info:
            customers.save(Customer(name="Ana"))
        assert exc_info.value.details["fields"] == ["tax_id"]
        assert customers.find_all() == []

    def test_unique_violation_is_duplicate_key(self, customers):
        customers.save(Customer(name="Ana", tax_id="1"))
        with pytest.raises(DuplicateKeyError):
            customers.save(Customer(name="Bia", tax_id="1"))


class TestTaxIdQueries:
    def test_customer_find_by_tax_id(self, customers):
        customers.save(Customer(name="Ana", tax_id="123.456.789-00"))
        assert customers.find_by_tax_id("123.456.789-00").name == "Ana"
        assert customers.find_by_tax_id("000") is None

    def test_customer_exists_by_tax_id(self, customers):
        customers.save(Customer(name="Ana", tax_id="123.456.789-00"))
        assert customers.exists_by_tax_id("123.456.789-00") is True
        assert customers.exists_by_tax_id("000") is False

    def test_supplier_tax_id_queries(self, db_session):
        suppliers = SupplierRepository(db_session)
        suppliers.save(Supplier(name="Acme", tax_id="11.111.111/0001-11"))
        assert suppliers.exists_by_tax_id("11.111.111/0001-11")
        assert suppliers.find_by_tax_id("11.111.111/0001-11").name == "Acme"
        assert suppliers.find_by_tax_id("nope") is None


class TestAddressQueries:
    @pytest.fixture
    def addresses(self, db_session):
        repo = AddressRepository(db_session)
        repo.save(Address(city="Recife", state="PE", postal_code="50000-000"))
        repo.save(Address(city="Olinda", state="PE", postal_code="53000-000"))
        repo.save(Address(city="Recife", state="RJ", postal_code="50000-000"))
        return repo

    def test_find_by_postal_code(self, addresses):
        assert len(addresses.find_by_postal_code("50000-000")) == 2

    def test_find_by_city(self, addresses):
        assert {a.state for a in addresses.find_by_city("Recife")} == {"PE", "RJ"}

    def test_find_by_state(self, addresses):
        assert {a.city for a in addresses.find_by_state("PE")} == {"Recife", "Olinda"}

    def test_find_by_city_and_state(self, addresses):
        found = addresses.find_by_city_and_state("Recife", "PE")
        assert len(found) == 1
        assert found[0].postal_code == "50000-000"

    def test_no_match_returns_empty(self, addresses):
        assert addresses.find_by_city("Manaus") == []

    def test_find_owner(self, db_session, addresses):
        address = addresses.find_by_city("Olinda")[0]
        assert addresses.find_owner(address.id) is None
        CustomerRepository(db_session).save(Customer(name="Ana", tax_id="1", address_id=address.id))
        assert isinstance(addresses.find_owner(address.id), Customer)


class TestProductQueries:
    def test_name_containing_ignore_case(self, products):
        products.save(Product(name="Mouse Gamer", stock_quantity=1))
        products.save(Product(name="mouse usb", stock_quantity=1))
        products.save(Product(name="Teclado", stock_quantity=1))
        names = [p.name for p in products.find_by_name_containing_ignore_case("MOUSE")]
        assert names == ["Mouse Gamer", "mouse usb"]

    def test_name_containing_ignore_case_folds_accents(self, products):
        products.save(Product(name="PÃO FRANCÊS", stock_quantity=1))
        products.save(Product(name="Pão de queijo", stock_quantity=1))
        products.save(Product(name="Pao sem acento", stock_quantity=1))
        names = [p.name for p in products.find_by_name_containing_ignore_case("pão")]
        assert names == ["PÃO FRANCÊS", "Pão de queijo"]
        assert [p.name for p in products.find_by_name_containing_ignore_case("FRANCÊS")] == ["PÃO FRANCÊS"]

    def test_name_search_treats_wildcards_literally(self, products):
        products.save(Product(name="100% cotton", stock_quantity=1))
        products.save(Product(name="1000 cotton", stock_quantity=1))
        names = [p.name for p in products.find_by_name_containing_ignore_case("100%")]
        assert names == ["100% cotton"]

    def test_find_by_supplier_id(self, db_session, products):
        supplier = SupplierRepository(db_session).save(Supplier(name="Acme", tax_id="1"))
        products.save(Product(name="A", stock_quantity=1, supplier_id=supplier.id))
        products.save(Product(name="B", stock_quantity=1))
        assert [p.name for p in products.find_by_supplier_id(supplier.id)] == ["A"]

    def test_stock_quantity_less_than_is_strict(self, products):
        products.save(Product(name="Nine", stock_quantity=9))
        products.save(Product(name="Ten", stock_quantity=10))
        products.save(Product(name="Zero", stock_quantity=0))
        names = [p.name for p in products.find_by_stock_quantity_less_than(10)]
        assert names == ["Nine", "Zero"]


class TestSaleAndLineItemQueries:
    @pytest.fixture
    def setup(self, db_session):
        customer = CustomerRepository(db_session).save(Customer(name="Ana", tax_id="1"))
        other = CustomerRepository(db_session).save(Customer(name="Bia", tax_id="2"))
        product = ProductRepository(db_session).save(Product(name="Widget", stock_quantity=1))
        sales = SaleRepository(db_session)
        first = sales.save(
            Sale(customer_id=customer.id, total_amount=Decimal("10"), timestamp=datetime(2024, 1, 1))
        )
        second = sales.save(
            Sale(customer_id=other.id, total_amount=Decimal("20"), timestamp=datetime(2024, 6, 30, 23, 59))
        )
        return customer, product, first, second

    def test_find_by_customer_id(self, db_session, setup):
        customer, _, first, _ = setup
        assert [s.id for s in SaleRepository(db_session).find_by_customer_id(customer.id)] == [first.id]

    def test_timestamp_between_is_inclusive(self, db_session, setup):
        _, _, first, second = setup
        found = SaleRepository(db_session).find_by_timestamp_between(
            datetime(2024, 1, 1), datetime(2024, 6, 30, 23, 59)
        )
        assert [s.id for s in found] == [first.id, second.id]

    def test_timestamp_between_excludes_outside(self, db_session, setup):
        found = SaleRepository(db_session).find_by_timestamp_between(
            datetime(2024, 1, 2), datetime(2024, 6, 30)
        )
        assert found == []

    def test_sale_timestamp_filled_on_save(self, db_session, setup):
        customer = setup[0]
        before = datetime.now(timezone.utc)
        sale = SaleRepository(db_session).save(Sale(customer_id=customer.id, total_amount=Decimal("1")))
        assert before <= sale.timestamp <= datetime.now(timezone.utc)

    def test_line_item_subtotal_on_insert_and_update(self, db_session, setup):
        _, product, first, _ = setup
        items = LineItemRepository(db_session)
        item = items.save(
            LineItem(sale_id=first.id, product_id=product.id, quantity=3, unit_price=Decimal("2.50"))
        )
        assert item.subtotal == Decimal("7.50")

        item.quantity = 5
        items.save(item)
        assert item.subtotal == Decimal("12.50")

    def test_line_item_lookups(self, db_session, setup):
        _, product, first, second = setup
        items = LineItemRepository(db_session)
        for sale in (first, first, second):
            items.save(LineItem(sale_id=sale.id, product_id=product.id, quantity=1, unit_price=Decimal("1")))
        assert len(items.find_by_sale_id(first.id)) == 2
        assert len(items.find_by_product_id(product.id)) == 3
        assert items.delete_by_sale_id(first.id) == 2
        assert items.find_by_sale_id(first.id) == []
