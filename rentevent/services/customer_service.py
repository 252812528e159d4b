"""Customer registration, lookup and the principal projection."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from rentevent.core.config import settings
from rentevent.core.errors import ConflictError, NotFoundError
from rentevent.core.logging_config import get_logger
from rentevent.db.models import Customer
from rentevent.db.session import unit_of_work
from rentevent.repositories.customer_repository import CustomerRepository
from rentevent.schemas.customer import CustomerCreate, Principal

logger = get_logger(__name__)


def hash_password(raw: str, iterations: Optional[int] = None) -> str:
    """Salted PBKDF2-SHA256 hash, stored as pbkdf2:sha256:<iterations>$<salt>$<hash>."""
    iterations = iterations or settings.PASSWORD_HASH_ITERATIONS
    return generate_password_hash(raw, method=f"pbkdf2:sha256:{iterations}", salt_length=16)


def verify_password(raw: str, encoded: str) -> bool:
    try:
        return check_password_hash(encoded, raw)
    except ValueError:
        # Stored value uses a hash method werkzeug does not know
        logger.warning("password_hash_unrecognized")
        return False


class CustomerService:
    """Customer accounts. Owned collections follow the customer on delete."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customers = CustomerRepository(session)

    async def register(self, request: CustomerCreate) -> Customer:
        """Create a customer with a hashed password.

        Raises:
            ConflictError: The username is already taken
        """
        async with unit_of_work(self.session):
            if await self.customers.get_by_username(request.username) is not None:
                raise ConflictError(
                    "Usuario ya registrado",
                    details={"username": request.username}
                )

            customer = Customer(
                username=request.username,
                password=hash_password(request.password),
                firstname=request.firstname,
                lastname=request.lastname,
                nationality=request.nationality,
                email=request.email or request.username,
                address=request.address,
                gender=request.gender,
                role=request.role,
                invoices=[],
                cards=[],
                events=[],
                security_questions=[],
            )
            await self.customers.save(customer)

        logger.info("customer_registered", customer_id=customer.id, role=customer.role.name)
        return customer

    async def get_by_username(self, username: str) -> Customer:
        customer = await self.customers.get_by_username(username)
        if customer is None:
            raise NotFoundError("Cliente no encontrado", details={"username": username})
        return customer

    async def get_principal(self, username: str) -> Principal:
        """Authentication view of the customer holding username."""
        return Principal.from_customer(await self.get_by_username(username))

    async def authenticate(self, username: str, password: str) -> Optional[Principal]:
        """Principal for valid credentials, None otherwise."""
        customer = await self.customers.get_by_username(username)
        if customer is None or not verify_password(password, customer.password):
            logger.info("customer_authentication_failed", username=username)
            return None
        return Principal.from_customer(customer)

    async def delete_customer(self, customer_id: int) -> None:
        """Delete a customer with its invoices, cards, events and questions."""
        async with unit_of_work(self.session):
            customer = await self.customers.get(customer_id)
            if customer is None:
                raise NotFoundError("Cliente no encontrado", details={"id": customer_id})
            await self.customers.delete(customer)

        logger.info("customer_deleted", customer_id=customer_id)
