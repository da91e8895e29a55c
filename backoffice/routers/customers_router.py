from fastapi import APIRouter, Depends, Response, status

from backoffice.dependencies import get_customer_service
from backoffice.schemas import CustomerIn, CustomerOut, SaleOut
from backoffice.services.parties import CustomerService

router = APIRouter()


@router.get("", response_model=list[CustomerOut])
def list_customers(service: CustomerService = Depends(get_customer_service)):
    return [CustomerOut.model_validate(c) for c in service.list()]


@router.get("/tax-id/{tax_id:path}", response_model=CustomerOut)
def get_customer_by_tax_id(tax_id: str, service: CustomerService = Depends(get_customer_service)):
    return CustomerOut.model_validate(service.get_by_tax_id(tax_id))


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    return CustomerOut.model_validate(service.get(customer_id))


@router.get("/{customer_id}/sales", response_model=list[SaleOut])
def list_customer_sales(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    return [SaleOut.model_validate(s) for s in service.sales_of(customer_id)]


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerIn, service: CustomerService = Depends(get_customer_service)):
    return CustomerOut.model_validate(service.create(payload))


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int, payload: CustomerIn, service: CustomerService = Depends(get_customer_service)
):
    return CustomerOut.model_validate(service.update(customer_id, payload))


@router.put("/{customer_id}/sales/{sale_id}", response_model=SaleOut)
def assign_sale(customer_id: int, sale_id: int, service: CustomerService = Depends(get_customer_service)):
    return SaleOut.model_validate(service.add_sale(customer_id, sale_id))


@router.delete("/{customer_id}/sales/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_sale(customer_id: int, sale_id: int, service: CustomerService = Depends(get_customer_service)):
    service.remove_sale(customer_id, sale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    service.delete(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
