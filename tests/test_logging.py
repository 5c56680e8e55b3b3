import json
import logging

import pytest

from normconv.core.logging import (
    JsonFormatter,
    correlation_context,
    get_correlation_id,
    get_logger,
    resolve_level,
)


def _record(message="norm_store_loaded", **structured):
    record = logging.LogRecord("normconv.test", logging.INFO, __file__, 1, message, None, None)
    if structured:
        record.structured_data = structured
    return record


def test_formatter_emits_one_json_object():
    payload = json.loads(JsonFormatter().format(_record(bands=["6-7"], skipped=1)))
    assert payload["message"] == "norm_store_loaded"
    assert payload["service"] == "normconv"
    assert payload["level"] == "INFO"
    assert payload["bands"] == ["6-7"]
    assert payload["skipped"] == 1
    assert "correlation_id" not in payload


def test_formatter_includes_bound_correlation_id():
    with correlation_context("req-9") as cid:
        payload = json.loads(JsonFormatter().format(_record()))
    assert cid == "req-9"
    assert payload["correlation_id"] == "req-9"
    assert get_correlation_id() is None


def test_correlation_context_generates_id():
    with correlation_context() as cid:
        assert cid and get_correlation_id() == cid


def test_adapter_merges_defaults_with_call_data(caplog):
    logger = get_logger("normconv.test.adapter", component="norm_store")
    with caplog.at_level(logging.WARNING, logger="normconv.test.adapter"):
        logger.warning("norm_band_replaced", extra={"structured_data": {"band_id": "6-7"}})
    (record,) = caplog.records
    assert record.structured_data == {"component": "norm_store", "band_id": "6-7"}


@pytest.mark.parametrize(
    "environment,debug,expected",
    [
        ("dev", False, logging.DEBUG),
        ("test", False, logging.DEBUG),
        ("staging", False, logging.INFO),
        ("staging", True, logging.DEBUG),
        ("prod", False, logging.INFO),
        ("prod", True, logging.INFO),
    ],
)
def test_resolve_level(environment, debug, expected):
    assert resolve_level(environment, debug) == expected
