"""
Prometheus metrics for the catalog.

Every family is registered under the ``rentevent`` namespace on the default
registry, so /metrics exposes e.g. ``rentevent_http_requests_total``.
"""

from prometheus_client import Counter, Gauge, Histogram, Info

from rentevent.core.config import settings


NAMESPACE = "rentevent"

# Request latencies: mostly SQLite reads, uploads reach into the seconds
HTTP_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
STORE_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


build_info = Info("build", "Catalog build and environment", namespace=NAMESPACE)
build_info.info({
    "name": settings.SERVICE_NAME,
    "version": settings.VERSION,
    "environment": settings.ENVIRONMENT,
    "image_store_backend": settings.IMAGE_STORE_BACKEND,
})

# HTTP, labelled by route template
http_requests_total = Counter(
    "http_requests_total", "HTTP requests by route and status",
    ["method", "endpoint", "status"], namespace=NAMESPACE,
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds", "HTTP request latency",
    ["method", "endpoint"], buckets=HTTP_BUCKETS, namespace=NAMESPACE,
)
http_requests_in_progress = Gauge(
    "http_requests_in_progress", "HTTP requests being handled",
    ["method"], namespace=NAMESPACE,
)
errors_total = Counter(
    "errors_total", "Exceptions that escaped the route handlers",
    ["error_type", "endpoint"], namespace=NAMESPACE,
)

# Catalog operations; outcome is "success" or the error code
catalog_operations_total = Counter(
    "catalog_operations_total", "Catalog operations by outcome",
    ["operation", "outcome"], namespace=NAMESPACE,
)

# Image store calls (upload, delete) per backend
image_store_operations_total = Counter(
    "image_store_operations_total", "Image store calls by outcome",
    ["backend", "operation", "status"], namespace=NAMESPACE,
)
image_store_operation_duration_seconds = Histogram(
    "image_store_operation_duration_seconds", "Image store call latency",
    ["backend", "operation"], buckets=STORE_BUCKETS, namespace=NAMESPACE,
)
