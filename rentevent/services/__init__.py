"""
Services package - Business Logic Layer

Contains all business logic separated from HTTP/API concerns.
"""
from rentevent.services.catalog_service import ServiceCatalog
from rentevent.services.customer_service import CustomerService
from rentevent.services.file_validator import FileValidator
from rentevent.services.provider_service import ProviderService

__all__ = ["ServiceCatalog", "CustomerService", "FileValidator", "ProviderService"]
