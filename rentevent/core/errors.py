"""
Catalog Error Handling

Standardized error codes and exceptions shared by the service layer and the
HTTP layer. Every error carries a stable label (ErrorCode) that clients can
branch on, an HTTP status and a details dict.
"""
from enum import Enum
from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Stable external error labels."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_MEDIA = "INVALID_MEDIA"
    INVALID_NAME = "INVALID_NAME"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    CONFLICT = "CONFLICT"
    TRANSACTION_FAILURE = "TRANSACTION_FAILURE"


class ServiceError(HTTPException):
    """
    Base class for business logic errors.

    Caught by the FastAPI exception handler and rendered as:

    {
        "code": "NOT_FOUND",
        "message": "Servicio no encontrado",
        "details": {"code": "SERV-abc12345"}
    }
    """

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: ErrorCode = ErrorCode.TRANSACTION_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=self.http_status,
            detail={
                "code": self.error_code.value,
                "message": message,
                "details": details or {}
            }
        )
        self.code = self.error_code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(ServiceError):
    """Referenced entity (service, provider, customer) does not exist."""
    http_status = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND


class InvalidMediaError(ServiceError):
    """Payload media type (or size) rejected by the file validator."""
    http_status = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    error_code = ErrorCode.INVALID_MEDIA


class InvalidNameError(ServiceError):
    """Payload filename missing or without extension."""
    http_status = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INVALID_NAME


class UpstreamUnavailableError(ServiceError):
    """External image store failed or could not be reached."""
    http_status = status.HTTP_502_BAD_GATEWAY
    error_code = ErrorCode.UPSTREAM_UNAVAILABLE


class ConflictError(ServiceError):
    """Unique-key violation on save."""
    http_status = status.HTTP_409_CONFLICT
    error_code = ErrorCode.CONFLICT


class TransactionFailureError(ServiceError):
    """Any other persistence failure; the unit of work was rolled back."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = ErrorCode.TRANSACTION_FAILURE
