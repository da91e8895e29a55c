from fastapi import APIRouter, Depends, Query, Response, status

from backoffice.dependencies import get_product_service
from backoffice.schemas import ProductIn, ProductOut
from backoffice.services.catalog import DEFAULT_LOW_STOCK_THRESHOLD, ProductService

router = APIRouter()


@router.get("", response_model=list[ProductOut])
def list_products(service: ProductService = Depends(get_product_service)):
    return [ProductOut.model_validate(p) for p in service.list()]


@router.get("/search", response_model=list[ProductOut])
def search_products(name: str = Query(..., min_length=1), service: ProductService = Depends(get_product_service)):
    return [ProductOut.model_validate(p) for p in service.search(name)]


@router.get("/supplier/{supplier_id}", response_model=list[ProductOut])
def products_by_supplier(supplier_id: int, service: ProductService = Depends(get_product_service)):
    return [ProductOut.model_validate(p) for p in service.by_supplier(supplier_id)]


@router.get("/low-stock", response_model=list[ProductOut])
def low_stock_products(
    threshold: int = Query(default=DEFAULT_LOW_STOCK_THRESHOLD),
    service: ProductService = Depends(get_product_service),
):
    return [ProductOut.model_validate(p) for p in service.low_stock(threshold)]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return ProductOut.model_validate(service.get(product_id))


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductIn, service: ProductService = Depends(get_product_service)):
    return ProductOut.model_validate(service.create(payload))


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn, service: ProductService = Depends(get_product_service)):
    return ProductOut.model_validate(service.update(product_id, payload))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    service.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
