"""FastAPI dependencies for sessions, service wiring and upload parsing."""

from decimal import Decimal
from typing import Optional

from fastapi import Depends, File, Form, Header, HTTPException, UploadFile, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.core.config import settings
from rentevent.core.logging_config import get_logger
from rentevent.db.session import get_session
from rentevent.schemas.image import ImagePayload
from rentevent.schemas.service import ServiceRequest
from rentevent.services.catalog_service import ServiceCatalog
from rentevent.services.customer_service import CustomerService
from rentevent.services.provider_service import ProviderService
from rentevent.storage import get_image_store
from rentevent.storage.protocol import ImageStore


logger = get_logger(__name__)


# ============================================================================
# Upload parsing
# ============================================================================


async def verify_content_length(content_length: Optional[int] = Header(None)) -> Optional[int]:
    """Reject oversized uploads before the body is read.

    The multipart envelope adds a little on top of the file itself, so the
    limit is applied with one extra megabyte of headroom; the file validator
    enforces the exact size.

    Raises:
        HTTPException: 413 if the request exceeds the maximum size
    """
    if content_length and content_length > settings.max_upload_bytes + 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum allowed: {settings.MAX_UPLOAD_SIZE_MB}MB"
        )
    return content_length


async def image_payload(
    file: UploadFile = File(...),
    _content_length: Optional[int] = Depends(verify_content_length),
) -> ImagePayload:
    """Read the multipart "file" part into an ImagePayload."""
    payload = await ImagePayload.from_upload(file)
    logger.debug(
        "image_payload_received",
        filename=payload.original_name,
        content_type=payload.content_type,
        size=payload.size,
    )
    return payload


def service_request_form(
    name: str = Form(...),
    type: str = Form(...),
    cost: Decimal = Form(...),
    state: str = Form(...),
    provider: str = Form(...),
    description: Optional[str] = Form(None),
    customization: Optional[str] = Form(None),
) -> ServiceRequest:
    """Build a ServiceRequest from multipart form fields.

    Raises:
        HTTPException: 422 when the fields do not form a valid request
    """
    try:
        return ServiceRequest(
            name=name,
            type=type,
            cost=cost,
            state=state,
            provider=provider,
            description=description,
            customization=customization,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=jsonable_encoder(e.errors(include_url=False, include_context=False)),
        )


# ============================================================================
# Service Layer Dependencies
# ============================================================================


def image_store() -> ImageStore:
    """Configured image store; overridden in tests."""
    return get_image_store()


def get_catalog(
    session: AsyncSession = Depends(get_session),
    store: ImageStore = Depends(image_store),
) -> ServiceCatalog:
    """Factory for ServiceCatalog with dependency injection.

    Usage in endpoint:
        @router.get("/services")
        async def list_services(catalog: ServiceCatalog = Depends(get_catalog)):
            return await catalog.list_services()
    """
    return ServiceCatalog(session, store)


def get_provider_service(
    session: AsyncSession = Depends(get_session),
    store: ImageStore = Depends(image_store),
) -> ProviderService:
    return ProviderService(session, store)


def get_customer_service(session: AsyncSession = Depends(get_session)) -> CustomerService:
    return CustomerService(session)
