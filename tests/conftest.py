"""
Test configuration and fixtures
"""

import os
import tempfile
from decimal import Decimal
from unittest.mock import patch

# settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("IMPORT_ERROR_DIR", tempfile.mkdtemp(prefix="backoffice-reports-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backoffice.db.models import Base  # noqa: E402
from backoffice.db.session import get_db  # noqa: E402
from backoffice.main import app  # noqa: E402
from backoffice.schemas import AddressIn, CustomerIn, ProductIn, SaleIn, SaleItemIn, SupplierIn  # noqa: E402
from backoffice.services.catalog import ProductService  # noqa: E402
from backoffice.services.parties import CustomerService, SupplierService  # noqa: E402
from backoffice.services.sales import SaleService  # noqa: E402

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # keep the lifespan away from the configured database
    with patch("backoffice.main.init_db"):
        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()


@pytest.fixture
def sample_address() -> AddressIn:
    return AddressIn(
        street="Av Paulista",
        number="1000",
        district="Bela Vista",
        city="São Paulo",
        state="SP",
        postal_code="01310-100",
    )


@pytest.fixture
def customer_payload(sample_address) -> CustomerIn:
    return CustomerIn(
        name="Maria Souza",
        tax_id="123.456.789-00",
        phone="+5511999999999",
        email="maria@example.com",
        address=sample_address,
    )


@pytest.fixture
def customer(db_session, customer_payload):
    return CustomerService(db_session).create(customer_payload)


@pytest.fixture
def supplier(db_session, sample_address):
    return SupplierService(db_session).create(
        SupplierIn(name="Acme", tax_id="11.111.111/0001-11", address=sample_address)
    )


@pytest.fixture
def product(db_session, supplier):
    return ProductService(db_session).create(
        ProductIn(name="Widget", price=Decimal("19.90"), stock_quantity=5, supplier_id=supplier.id)
    )


@pytest.fixture
def sale(db_session, customer, product):
    return SaleService(db_session).create(
        SaleIn(
            customer_id=customer.id,
            total_amount=Decimal("59.70"),
            items=[
                SaleItemIn(product_id=product.id, quantity=2, unit_price=Decimal("19.90")),
                SaleItemIn(product_id=product.id, quantity=1, unit_price=Decimal("19.90")),
            ],
        )
    )
