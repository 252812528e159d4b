"""
Pytest configuration and shared fixtures for the catalog tests.

This module provides:
- Database fixtures (one SQLite file per test)
- A mocked image store
- Seeded provider and service
- Async API client with dependency overrides
- Payload factories
"""

import itertools
import os
import tempfile
from decimal import Decimal
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock

# Settings are read at import time; point storage away from the working tree
os.environ.setdefault("STORAGE_PATH", tempfile.mkdtemp(prefix="rentevent-storage-"))
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from rentevent.api.dependencies import image_store as image_store_dependency
from rentevent.db.models import Image, Provider, Service, ServiceState
from rentevent.db.session import build_engine, build_sessionmaker, get_session, init_models
from rentevent.main import app
from rentevent.schemas.image import ImagePayload, UploadResult
from rentevent.schemas.service import ServiceRequest


# ============================================================================
# Database fixtures
# ============================================================================

@pytest.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database with the schema created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session bound to the per-test database."""
    async with build_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
async def fresh_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Second session on the same database, for reading back committed state."""
    async with build_sessionmaker(test_engine)() as session:
        yield session


# ============================================================================
# Image store fixtures
# ============================================================================

@pytest.fixture
def mock_image_store() -> AsyncMock:
    """Image store that hands out cld_1, cld_2, ... on upload.

    Returns:
        AsyncMock: upload and delete are awaitable and record their calls
    """
    counter = itertools.count(1)

    def fake_upload(payload: ImagePayload, filename: str) -> UploadResult:
        n = next(counter)
        return UploadResult(url=f"https://cdn.test/rentevent/cld_{n}/{filename}", public_id=f"cld_{n}")

    store = AsyncMock()
    store.backend_name = "mock"
    store.upload.side_effect = fake_upload
    store.delete.return_value = None
    return store


# ============================================================================
# Test data fixtures
# ============================================================================

@pytest.fixture
def sample_image_bytes() -> bytes:
    """Minimal PNG signature plus padding; the catalog never decodes images."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def make_payload(sample_image_bytes: bytes) -> Callable[..., ImagePayload]:
    """Factory for ImagePayload with sensible defaults."""
    def factory(
        original_name: str = "djluxury.png",
        content_type: str = "image/png",
        content: bytes = None,
    ) -> ImagePayload:
        return ImagePayload(
            content=sample_image_bytes if content is None else content,
            content_type=content_type,
            original_name=original_name,
        )
    return factory


@pytest.fixture
def blob_payload() -> ImagePayload:
    """What a browser sends for an empty Blob in the file field."""
    return ImagePayload(content=b"", content_type="application/octet-stream", original_name="blob")


@pytest.fixture
def service_request() -> ServiceRequest:
    return ServiceRequest(
        name="DJ Luxury",
        type="AUDIO",
        cost=Decimal("500.00"),
        state="ACTIVE",
        description="8h set",
        provider="SoundCo",
    )


@pytest.fixture
async def seeded_provider(test_db_session: AsyncSession) -> Provider:
    """Provider SoundCo with no services."""
    provider = Provider(name="SoundCo", email="ventas@soundco.ec", services=[])
    test_db_session.add(provider)
    await test_db_session.commit()
    return provider


@pytest.fixture
async def seeded_service(test_db_session: AsyncSession, seeded_provider: Provider) -> Service:
    """Service SERV-abc12345 owned by SoundCo with primary image cld_old."""
    service = Service(
        code="SERV-abc12345",
        name="DJ Luxury",
        type="AUDIO",
        cost=Decimal("450.00"),
        state=ServiceState.ACTIVE,
        description="6h set",
        events=[],
    )
    service.images.append(Image(
        url="https://cdn.test/rentevent/cld_old/old-cover.png",
        filename="old-cover.png",
        public_id="cld_old",
        tag="SERVICIO",
        position=0,
    ))
    seeded_provider.services.append(service)
    await test_db_session.commit()
    return service


# ============================================================================
# API Client fixtures
# ============================================================================

@pytest.fixture
async def async_client(test_db_session: AsyncSession, mock_image_store: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Async client with the database session and image store overridden.

    Yields:
        AsyncClient: Asynchronous test client
    """
    async def override_get_session():
        yield test_db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[image_store_dependency] = lambda: mock_image_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
