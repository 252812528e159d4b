"""Customer, provider and principal models."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from rentevent.db.models import Customer, Gender, Role


class CustomerCreate(BaseModel):
    username: EmailStr
    password: str = Field(..., min_length=8)
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    nationality: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gender: Optional[Gender] = None
    role: Role = Role.CUSTOMER


class CustomerView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    nationality: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class Principal(BaseModel):
    """Authentication-facing projection of a Customer.

    The status flags are fixed to active; there is no account lifecycle yet.
    """
    username: str
    password: str
    authorities: List[str]
    account_non_expired: bool = True
    account_non_locked: bool = True
    credentials_non_expired: bool = True
    enabled: bool = True

    @classmethod
    def from_customer(cls, customer: Customer) -> "Principal":
        return cls(
            username=customer.username,
            password=customer.password,
            authorities=[customer.role.name],
        )


class ProviderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)


class ProviderView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    service_codes: List[str] = []
