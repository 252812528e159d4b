"""Customer API endpoints."""

from fastapi import APIRouter, Depends, Response, status

from rentevent.api.dependencies import get_customer_service
from rentevent.schemas.customer import CustomerCreate, CustomerView, Principal
from rentevent.services.customer_service import CustomerService


router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


@router.post("", response_model=CustomerView, status_code=status.HTTP_201_CREATED)
async def register_customer(request: CustomerCreate, customers: CustomerService = Depends(get_customer_service)):
    customer = await customers.register(request)
    return CustomerView.model_validate(customer)


@router.get("/{username}/principal", response_model=Principal, response_model_exclude={"password"})
async def get_principal(username: str, customers: CustomerService = Depends(get_customer_service)):
    """Authentication projection of a customer (the password hash is never returned)."""
    return await customers.get_principal(username)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: int, customers: CustomerService = Depends(get_customer_service)):
    await customers.delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
