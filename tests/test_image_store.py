"""
Image store backend tests.

LocalImageStore runs against tmp_path; CloudinaryImageStore runs against an
httpx.MockTransport so no request leaves the process.
"""

import hashlib
import json
from urllib.parse import parse_qs

import httpx
import pytest

from rentevent.core.errors import UpstreamUnavailableError
from rentevent.schemas.image import ImagePayload
from rentevent.storage.cloudinary import CloudinaryImageStore
from rentevent.storage.local import LocalImageStore


@pytest.fixture
def png_payload() -> ImagePayload:
    return ImagePayload(content=b"\x89PNG-bytes", content_type="image/png", original_name="DJ Luxury.png")


# ============================================================================
# LocalImageStore
# ============================================================================

@pytest.mark.unit
async def test_local_upload_writes_file(tmp_path, png_payload):
    store = LocalImageStore(str(tmp_path), base_url="/storage/")

    result = await store.upload(png_payload, "dj-luxury.png")

    assert result.public_id.startswith("dj-luxury_")
    assert result.url == f"/storage/{result.public_id}.png"
    assert store.get_local_path(result.url).read_bytes() == b"\x89PNG-bytes"


@pytest.mark.unit
async def test_local_upload_ids_are_unique(tmp_path, png_payload):
    store = LocalImageStore(str(tmp_path))

    first = await store.upload(png_payload, "cover.png")
    second = await store.upload(png_payload, "cover.png")

    assert first.public_id != second.public_id
    assert len(list(tmp_path.iterdir())) == 2


@pytest.mark.unit
async def test_local_delete_removes_file(tmp_path, png_payload):
    store = LocalImageStore(str(tmp_path))
    result = await store.upload(png_payload, "cover.png")

    await store.delete(result.public_id)

    assert not store.get_local_path(result.url).exists()


@pytest.mark.unit
async def test_local_delete_unknown_is_noop(tmp_path):
    store = LocalImageStore(str(tmp_path))

    await store.delete("missing_0123456789ab")


@pytest.mark.unit
async def test_local_delete_ignores_path_traversal(tmp_path):
    outside = tmp_path / "keep.png"
    outside.write_bytes(b"keep")
    store = LocalImageStore(str(tmp_path / "images"))

    await store.delete("../keep")

    assert outside.exists()


@pytest.mark.unit
async def test_local_upload_failure_is_upstream_error(tmp_path, png_payload):
    store = LocalImageStore(str(tmp_path))
    # A directory where the file should go makes open() fail
    (tmp_path / "blocked").mkdir()
    store._new_public_id = lambda filename: "blocked"

    with pytest.raises(UpstreamUnavailableError):
        await store.upload(png_payload, "x")


# ============================================================================
# CloudinaryImageStore
# ============================================================================

def make_store(handler) -> CloudinaryImageStore:
    return CloudinaryImageStore(
        cloud_name="demo",
        api_key="key-123",
        api_secret="secret-abc",
        folder="rentevent/servicios",
        api_url="https://api.cloudinary.test/v1_1/",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
def test_cloudinary_signature():
    store = make_store(lambda request: httpx.Response(200, json={}))
    params = {"public_id": "abc", "timestamp": 1700000000, "folder": "", "invalidate": None}

    expected = hashlib.sha1(b"public_id=abc&timestamp=1700000000secret-abc").hexdigest()
    assert store.sign(params) == expected


@pytest.mark.unit
async def test_cloudinary_upload_success(png_payload):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={
            "public_id": "rentevent/servicios/dj-luxury_x1",
            "secure_url": "https://res.cloudinary.test/demo/image/upload/dj-luxury_x1.png",
            "url": "http://res.cloudinary.test/demo/image/upload/dj-luxury_x1.png",
        })

    result = await make_store(handler).upload(png_payload, "dj-luxury.png")

    assert seen["url"] == "https://api.cloudinary.test/v1_1/demo/image/upload"
    assert b'name="signature"' in seen["body"]
    assert b'name="api_key"' in seen["body"]
    assert b'filename="dj-luxury.png"' in seen["body"]
    assert result.public_id == "rentevent/servicios/dj-luxury_x1"
    assert result.url.startswith("https://")


@pytest.mark.unit
async def test_cloudinary_upload_rejected(png_payload):
    store = make_store(lambda request: httpx.Response(401, json={"error": {"message": "Invalid Signature"}}))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await store.upload(png_payload, "cover.png")

    assert exc_info.value.status_code == 502
    assert exc_info.value.details["status_code"] == 401


@pytest.mark.unit
async def test_cloudinary_upload_incomplete_response(png_payload):
    store = make_store(lambda request: httpx.Response(200, json={"secure_url": "https://x"}))

    with pytest.raises(UpstreamUnavailableError):
        await store.upload(png_payload, "cover.png")


@pytest.mark.unit
async def test_cloudinary_upload_unreadable_response(png_payload):
    store = make_store(lambda request: httpx.Response(200, content=b"<html>"))

    with pytest.raises(UpstreamUnavailableError):
        await store.upload(png_payload, "cover.png")


@pytest.mark.unit
async def test_cloudinary_timeout(png_payload):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await make_store(handler).upload(png_payload, "cover.png")

    assert exc_info.value.message == "Image store timed out"


@pytest.mark.unit
async def test_cloudinary_unreachable(png_payload):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await make_store(handler).upload(png_payload, "cover.png")

    assert exc_info.value.message == "Image store unreachable"


@pytest.mark.unit
@pytest.mark.parametrize("result", ["ok", "not found"])
async def test_cloudinary_delete_success(result):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, content=json.dumps({"result": result}))

    await make_store(handler).delete("rentevent/servicios/cld_old")

    assert seen["url"] == "https://api.cloudinary.test/v1_1/demo/image/destroy"
    assert seen["form"]["public_id"] == ["rentevent/servicios/cld_old"]
    assert seen["form"]["invalidate"] == ["true"]


@pytest.mark.unit
async def test_cloudinary_delete_unexpected_result():
    store = make_store(lambda request: httpx.Response(200, json={"result": "error"}))

    with pytest.raises(UpstreamUnavailableError):
        await store.delete("cld_old")
