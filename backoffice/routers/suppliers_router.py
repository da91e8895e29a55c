from fastapi import APIRouter, Depends, Response, status

from backoffice.dependencies import get_supplier_service
from backoffice.schemas import ProductOut, SupplierIn, SupplierOut
from backoffice.services.parties import SupplierService

router = APIRouter()


@router.get("", response_model=list[SupplierOut])
def list_suppliers(service: SupplierService = Depends(get_supplier_service)):
    return [SupplierOut.model_validate(s) for s in service.list()]


@router.get("/tax-id/{tax_id:path}", response_model=SupplierOut)
def get_supplier_by_tax_id(tax_id: str, service: SupplierService = Depends(get_supplier_service)):
    return SupplierOut.model_validate(service.get_by_tax_id(tax_id))


@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: int, service: SupplierService = Depends(get_supplier_service)):
    return SupplierOut.model_validate(service.get(supplier_id))


@router.get("/{supplier_id}/products", response_model=list[ProductOut])
def list_supplier_products(supplier_id: int, service: SupplierService = Depends(get_supplier_service)):
    return [ProductOut.model_validate(p) for p in service.products_of(supplier_id)]


@router.post("", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(payload: SupplierIn, service: SupplierService = Depends(get_supplier_service)):
    return SupplierOut.model_validate(service.create(payload))


@router.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(
    supplier_id: int, payload: SupplierIn, service: SupplierService = Depends(get_supplier_service)
):
    return SupplierOut.model_validate(service.update(supplier_id, payload))


@router.put("/{supplier_id}/products/{product_id}", response_model=ProductOut)
def link_product(supplier_id: int, product_id: int, service: SupplierService = Depends(get_supplier_service)):
    return ProductOut.model_validate(service.add_product(supplier_id, product_id))


@router.delete("/{supplier_id}/products/{product_id}", response_model=ProductOut)
def unlink_product(supplier_id: int, product_id: int, service: SupplierService = Depends(get_supplier_service)):
    return ProductOut.model_validate(service.remove_product(supplier_id, product_id))


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(supplier_id: int, service: SupplierService = Depends(get_supplier_service)):
    service.delete(supplier_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
