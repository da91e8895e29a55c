from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status

from backoffice.dependencies import get_sale_service
from backoffice.schemas import LineItemOut, SaleIn, SaleItemIn, SaleOut
from backoffice.services.sales import SaleService

router = APIRouter()


@router.get("", response_model=list[SaleOut])
def list_sales(service: SaleService = Depends(get_sale_service)):
    return [SaleOut.model_validate(s) for s in service.list()]


@router.get("/customer/{customer_id}", response_model=list[SaleOut])
def sales_by_customer(customer_id: int, service: SaleService = Depends(get_sale_service)):
    return [SaleOut.model_validate(s) for s in service.by_customer(customer_id)]


@router.get("/period", response_model=list[SaleOut])
def sales_in_period(
    start: datetime = Query(..., description="ISO-8601, inclusive"),
    end: datetime = Query(..., description="ISO-8601, inclusive"),
    service: SaleService = Depends(get_sale_service),
):
    return [SaleOut.model_validate(s) for s in service.between(start, end)]


@router.get("/{sale_id}", response_model=SaleOut)
def get_sale(sale_id: int, service: SaleService = Depends(get_sale_service)):
    return SaleOut.model_validate(service.get(sale_id))


@router.post("", response_model=SaleOut, status_code=status.HTTP_201_CREATED)
def create_sale(payload: SaleIn, service: SaleService = Depends(get_sale_service)):
    return SaleOut.model_validate(service.create(payload))


@router.put("/{sale_id}", response_model=SaleOut)
def update_sale(sale_id: int, payload: SaleIn, service: SaleService = Depends(get_sale_service)):
    return SaleOut.model_validate(service.update(sale_id, payload))


@router.post("/{sale_id}/items", response_model=LineItemOut, status_code=status.HTTP_201_CREATED)
def add_sale_item(sale_id: int, payload: SaleItemIn, service: SaleService = Depends(get_sale_service)):
    return LineItemOut.model_validate(service.add_line_item(sale_id, payload))


@router.delete("/{sale_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_sale_item(sale_id: int, item_id: int, service: SaleService = Depends(get_sale_service)):
    service.remove_line_item(sale_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(sale_id: int, service: SaleService = Depends(get_sale_service)):
    service.delete(sale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
