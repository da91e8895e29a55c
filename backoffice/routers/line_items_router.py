from fastapi import APIRouter, Depends, Response, status

from backoffice.dependencies import get_line_item_service
from backoffice.schemas import LineItemIn, LineItemOut
from backoffice.services.sales import LineItemService

router = APIRouter()


@router.get("", response_model=list[LineItemOut])
def list_line_items(service: LineItemService = Depends(get_line_item_service)):
    return [LineItemOut.model_validate(i) for i in service.list()]


@router.get("/sale/{sale_id}", response_model=list[LineItemOut])
def line_items_by_sale(sale_id: int, service: LineItemService = Depends(get_line_item_service)):
    return [LineItemOut.model_validate(i) for i in service.by_sale(sale_id)]


@router.get("/product/{product_id}", response_model=list[LineItemOut])
def line_items_by_product(product_id: int, service: LineItemService = Depends(get_line_item_service)):
    return [LineItemOut.model_validate(i) for i in service.by_product(product_id)]


@router.get("/{item_id}", response_model=LineItemOut)
def get_line_item(item_id: int, service: LineItemService = Depends(get_line_item_service)):
    return LineItemOut.model_validate(service.get(item_id))


@router.post("", response_model=LineItemOut, status_code=status.HTTP_201_CREATED)
def create_line_item(payload: LineItemIn, service: LineItemService = Depends(get_line_item_service)):
    return LineItemOut.model_validate(service.create(payload))


@router.put("/{item_id}", response_model=LineItemOut)
def update_line_item(item_id: int, payload: LineItemIn, service: LineItemService = Depends(get_line_item_service)):
    return LineItemOut.model_validate(service.update(item_id, payload))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_line_item(item_id: int, service: LineItemService = Depends(get_line_item_service)):
    service.delete(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
