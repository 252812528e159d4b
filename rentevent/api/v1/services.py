"""
Catalog API endpoints.

Router handles HTTP concerns (form parsing, status codes, response shape);
ServiceCatalog handles orchestration and raises ServiceError subclasses,
which the exception handlers turn into JSON error responses.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from rentevent.api.dependencies import get_catalog, image_payload, service_request_form
from rentevent.core.logging_config import get_logger
from rentevent.schemas.image import ImagePayload, ImageView
from rentevent.schemas.service import ServiceRequest, ServiceView
from rentevent.services.catalog_service import ServiceCatalog


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/services", tags=["services"])


@router.get("", response_model=List[ServiceView])
async def list_services(catalog: ServiceCatalog = Depends(get_catalog)):
    """List every service in the catalog."""
    services = await catalog.list_services()
    return [ServiceView.from_service(service) for service in services]


@router.get("/code/{code}", response_model=ServiceView)
async def get_service_by_code(code: str, catalog: ServiceCatalog = Depends(get_catalog)):
    """Get a service by its SERV- code.

    Raises:
        HTTPException: 404 if no service has this code
    """
    view = await catalog.get_service_by_code(code)
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return view


@router.get("/{service_id}", response_model=ServiceView)
async def get_service(service_id: int, catalog: ServiceCatalog = Depends(get_catalog)):
    """Get a service by id, including the events that book it."""
    return await catalog.get_service_by_id(service_id)


@router.post("", response_model=ServiceView, status_code=status.HTTP_201_CREATED)
async def create_service(
    request: ServiceRequest = Depends(service_request_form),
    payload: ImagePayload = Depends(image_payload),
    catalog: ServiceCatalog = Depends(get_catalog),
):
    """Create a service with its primary image (multipart form + "file")."""
    logger.info(
        "create_service_request_received",
        name=request.name,
        provider=request.provider,
        filename=payload.original_name,
        content_type=payload.content_type,
    )
    service = await catalog.create_service(request, payload)
    return ServiceView.from_service(service)


@router.put("/{code}", response_model=ServiceView)
async def update_service(
    code: str,
    request: ServiceRequest = Depends(service_request_form),
    payload: ImagePayload = Depends(image_payload),
    catalog: ServiceCatalog = Depends(get_catalog),
):
    """Update a service. Send an empty blob as "file" to keep the image."""
    logger.info(
        "update_service_request_received",
        code=code,
        provider=request.provider,
        filename=payload.original_name,
    )
    service = await catalog.update_service(code, request, payload)
    return ServiceView.from_service(service)


@router.post("/{service_id}/images", response_model=ImageView, status_code=status.HTTP_201_CREATED)
async def attach_image(
    service_id: int,
    payload: ImagePayload = Depends(image_payload),
    catalog: ServiceCatalog = Depends(get_catalog),
):
    """Add a secondary image to a service."""
    image = await catalog.attach_image(service_id, payload)
    return ImageView.model_validate(image)


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(code: str, catalog: ServiceCatalog = Depends(get_catalog)):
    """Delete a service and its images."""
    await catalog.delete_service(code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
