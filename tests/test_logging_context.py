"""
Tests for trace IDs and the structured logging setup.

A trace ID belongs to the request (task) that set it, is echoed back in
the response headers and is attached to every log record emitted while
the request is handled.
"""

import asyncio
import json
import logging

import pytest
from httpx import AsyncClient

from rentevent.core.config import settings
from rentevent.core.logging_config import (
    CustomJsonFormatter,
    InfoAndBelowFilter,
    add_app_context,
    clear_trace_id,
    get_logger,
    get_logging_config,
    get_trace_id,
    set_trace_id,
    setup_logging,
)


@pytest.mark.unit
def test_clear_trace_id_resets_context():
    set_trace_id("trace-catalog-1")
    assert get_trace_id() == "trace-catalog-1"

    clear_trace_id()

    assert get_trace_id() is None


@pytest.mark.unit
async def test_concurrent_requests_keep_their_own_trace_id():
    async def handle(trace_id: str, pause: float) -> str:
        set_trace_id(trace_id)
        await asyncio.sleep(pause)
        return get_trace_id()

    seen = await asyncio.gather(*(handle(f"req-{i}", 0.01 * (i % 2)) for i in range(6)))

    assert seen == [f"req-{i}" for i in range(6)]


@pytest.mark.api
async def test_generated_trace_ids_differ_per_request(async_client: AsyncClient):
    first, second = await asyncio.gather(
        async_client.get("/api/v1/health"),
        async_client.get("/api/v1/health"),
    )

    assert first.headers["X-Trace-ID"]
    assert first.headers["X-Trace-ID"] != second.headers["X-Trace-ID"]
    assert first.headers["X-Correlation-ID"] == first.headers["X-Trace-ID"]


@pytest.mark.api
async def test_correlation_header_is_adopted_as_trace_id(async_client: AsyncClient):
    response = await async_client.get("/api/v1/health", headers={"X-Correlation-ID": "upstream-42"})

    assert response.headers["X-Trace-ID"] == "upstream-42"


# ============================================================================
# Processors and config
# ============================================================================


@pytest.mark.unit
def test_add_app_context_includes_trace_id():
    set_trace_id("trace-xyz")
    try:
        event = add_app_context(None, "info", {"event": "service_created"})
    finally:
        clear_trace_id()

    assert event["trace_id"] == "trace-xyz"
    assert event["service"]
    assert "version" in event


@pytest.mark.unit
def test_add_app_context_without_trace_id():
    clear_trace_id()

    event = add_app_context(None, "info", {"event": "service_created"})

    assert "trace_id" not in event


@pytest.mark.unit
def test_info_and_below_filter():
    log_filter = InfoAndBelowFilter()

    def record(level):
        return logging.LogRecord("rentevent", level, __file__, 1, "msg", None, None)

    assert log_filter.filter(record(logging.INFO))
    assert log_filter.filter(record(logging.DEBUG))
    assert not log_filter.filter(record(logging.ERROR))


@pytest.mark.unit
@pytest.mark.parametrize("json_logs, formatter", [(True, "json"), (False, "console")])
def test_logging_config_formatter_choice(json_logs, formatter):
    config = get_logging_config(debug=False, json_logs=json_logs)

    assert config["handlers"]["stdout"]["formatter"] == formatter
    assert config["handlers"]["stderr"]["level"] == "WARNING"


@pytest.mark.unit
def test_json_formatter_fills_timestamp_and_level():
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    record = logging.LogRecord(
        "rentevent.services.catalog_service", logging.WARNING, __file__, 1, "image_asset_orphaned", None, None
    )

    payload = json.loads(formatter.format(record))

    assert payload["timestamp"]
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "rentevent.services.catalog_service"


@pytest.mark.unit
def test_warnings_reach_stderr_and_stay_off_stdout(capfd):
    setup_logging(debug=False, json_logs=True)
    capfd.readouterr()

    try:
        get_logger("rentevent.services.catalog_service").warning("image_asset_orphaned", public_id="cld_9")
        out, err = capfd.readouterr()
    finally:
        # Rebind the handlers to the real streams
        with capfd.disabled():
            setup_logging(debug=settings.is_debug_mode, json_logs=settings.use_json_logs)

    assert "image_asset_orphaned" in err
    assert "cld_9" in err
    assert "image_asset_orphaned" not in out
    assert '"timestamp": null' not in err
