from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from backoffice.dependencies import get_address_service
from backoffice.schemas import AddressIn, AddressOut
from backoffice.services.addresses import AddressService

router = APIRouter()


@router.get("", response_model=list[AddressOut])
def list_addresses(service: AddressService = Depends(get_address_service)):
    return [AddressOut.model_validate(a) for a in service.list()]


@router.get("/search", response_model=list[AddressOut])
def search_addresses(
    postal_code: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    service: AddressService = Depends(get_address_service),
):
    return [AddressOut.model_validate(a) for a in service.search(postal_code, city, state)]


@router.get("/{address_id}", response_model=AddressOut)
def get_address(address_id: int, service: AddressService = Depends(get_address_service)):
    return AddressOut.model_validate(service.get(address_id))


@router.post("", response_model=AddressOut, status_code=status.HTTP_201_CREATED)
def create_address(payload: AddressIn, service: AddressService = Depends(get_address_service)):
    return AddressOut.model_validate(service.create(payload))


@router.put("/{address_id}", response_model=AddressOut)
def update_address(address_id: int, payload: AddressIn, service: AddressService = Depends(get_address_service)):
    return AddressOut.model_validate(service.update(address_id, payload))


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(address_id: int, service: AddressService = Depends(get_address_service)):
    service.delete(address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
