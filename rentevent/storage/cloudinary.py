"""Cloudinary CDN image store over its signed REST API."""

import hashlib
import time
from typing import Any, Dict, Optional

import httpx

from rentevent.core.errors import UpstreamUnavailableError
from rentevent.core.logging_config import get_logger
from rentevent.schemas.image import ImagePayload, UploadResult


logger = get_logger(__name__)


class CloudinaryImageStore:
    """Image store backed by the Cloudinary upload API.

    Uses signed requests (SHA-1 over the sorted parameters plus the API
    secret), so no SDK is required. Every call opens its own
    httpx.AsyncClient; the store itself holds no connection state.
    """

    backend_name = "cloudinary"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: Optional[str] = None,
        api_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Cloudinary image store.

        Args:
            cloud_name: Cloudinary account (cloud) name
            api_key: API key
            api_secret: API secret used to sign requests
            folder: Optional folder prefix for uploaded assets
            api_url: Base API URL
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.base_url = f"{api_url.rstrip('/')}/{cloud_name}/image"
        self.timeout = timeout
        self.transport = transport

        logger.info(
            "cloudinary_image_store_initialized",
            cloud_name=cloud_name,
            folder=folder,
        )

    def sign(self, params: Dict[str, Any]) -> str:
        """Compute the request signature for params."""
        to_sign = "&".join(
            f"{key}={value}" for key, value in sorted(params.items())
            if value is not None and value != ""
        )
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {key: value for key, value in params.items() if value is not None}
        params["timestamp"] = int(time.time())
        params["signature"] = self.sign(params)
        params["api_key"] = self.api_key
        return params

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _post(self, operation: str, data: Dict[str, Any], files: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}/{operation}"
        start_time = time.time()

        try:
            async with self._client() as client:
                response = await client.post(url, data=data, files=files)
        except httpx.TimeoutException as exc:
            logger.error(
                "cloudinary_request_timeout",
                operation=operation,
                timeout=self.timeout,
                error=str(exc),
            )
            raise UpstreamUnavailableError(
                "Image store timed out",
                details={"operation": operation}
            ) from exc
        except httpx.RequestError as exc:
            logger.error(
                "cloudinary_request_failed",
                operation=operation,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise UpstreamUnavailableError(
                "Image store unreachable",
                details={"operation": operation}
            ) from exc

        duration_ms = (time.time() - start_time) * 1000

        if response.status_code >= 400:
            logger.error(
                "cloudinary_request_rejected",
                operation=operation,
                status_code=response.status_code,
                body=response.text[:500],
                duration_ms=round(duration_ms, 2),
            )
            raise UpstreamUnavailableError(
                "Image store returned an error",
                details={"operation": operation, "status_code": response.status_code}
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(
                "Image store returned an unreadable response",
                details={"operation": operation}
            ) from exc

        logger.debug(
            "cloudinary_request_success",
            operation=operation,
            duration_ms=round(duration_ms, 2),
        )
        return body

    async def upload(self, payload: ImagePayload, filename: str) -> UploadResult:
        """Upload the payload; Cloudinary assigns the public id."""
        data = self._signed({
            "folder": self.folder,
            "use_filename": "true",
            "unique_filename": "true",
        })
        files = {
            "file": (filename, payload.content, payload.content_type or "application/octet-stream"),
        }

        body = await self._post("upload", data, files)

        url = body.get("secure_url") or body.get("url")
        public_id = body.get("public_id")
        if not url or not public_id:
            logger.error("cloudinary_upload_incomplete_response", keys=sorted(body))
            raise UpstreamUnavailableError(
                "Image store response lacks url or public_id",
                details={"filename": filename}
            )

        logger.info(
            "cloudinary_upload_success",
            filename=filename,
            public_id=public_id,
            bytes=payload.size,
        )
        return UploadResult(url=url, public_id=public_id)

    async def delete(self, public_id: str) -> None:
        """Destroy the asset; "not found" counts as success."""
        data = self._signed({"public_id": public_id, "invalidate": "true"})
        body = await self._post("destroy", data)

        result = body.get("result")
        if result == "ok":
            logger.info("cloudinary_delete_success", public_id=public_id)
        elif result == "not found":
            logger.warning("cloudinary_delete_not_found", public_id=public_id)
        else:
            logger.error("cloudinary_delete_unexpected_result", public_id=public_id, result=result)
            raise UpstreamUnavailableError(
                "Image store could not delete the asset",
                details={"public_id": public_id, "result": result}
            )
