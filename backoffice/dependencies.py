"""
Per-request service construction for the routers.

Each service gets the request's session; nothing is shared across requests.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_settings
from backoffice.db.session import get_db
from backoffice.services.addresses import AddressService
from backoffice.services.catalog import ProductService
from backoffice.services.parties import CustomerService, SupplierService
from backoffice.services.sales import LineItemService, SaleService


def get_customer_service(
    db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
) -> CustomerService:
    return CustomerService(db, policy=settings.OWNER_DELETE_POLICY)


def get_supplier_service(
    db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
) -> SupplierService:
    return SupplierService(db, policy=settings.OWNER_DELETE_POLICY)


def get_address_service(db: Session = Depends(get_db)) -> AddressService:
    return AddressService(db)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_sale_service(db: Session = Depends(get_db)) -> SaleService:
    return SaleService(db)


def get_line_item_service(db: Session = Depends(get_db)) -> LineItemService:
    return LineItemService(db)
