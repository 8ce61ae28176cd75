import logging

import pytest
import requests

from sepay_payments import ErrorKind, SePayError, Transport
from sepay_payments.core.auth import basic_auth_header

from conftest import make_response


def test_get_builds_versioned_url_and_headers(make_transport):
    transport = make_transport(make_response(200, {"data": []}), user_agent="test-agent/1.0")

    result = transport.get("/order", {"per_page": 5})

    assert result == {"data": []}
    (call,) = transport.session.calls
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test.local/v1/order"
    assert call["params"] == {"per_page": 5}
    assert call["timeout"] == 30
    assert "json" not in call
    headers = call["headers"]
    assert headers["Authorization"] == basic_auth_header("M1", "k")
    assert headers["Accept"] == "application/json"
    assert headers["Content-Type"] == "application/json"
    assert headers["User-Agent"] == "test-agent/1.0"


def test_post_sends_json_body(make_transport):
    transport = make_transport(make_response(200, {"success": True}))

    transport.post("order/cancel", {"order_invoice_number": "INV1"})

    (call,) = transport.session.calls
    assert call["method"] == "POST"
    assert call["url"] == "https://api.test.local/v1/order/cancel"
    assert call["json"] == {"order_invoice_number": "INV1"}


def test_server_error_retries_until_attempts_exhausted(make_transport, sleeper):
    transport = make_transport(
        make_response(500, {"message": "boom"}),
        make_response(502, {"message": "boom"}),
        make_response(503, {"message": "still down"}),
    )

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    error = excinfo.value
    assert error.kind is ErrorKind.SERVER
    assert error.status_code == 503
    assert error.message == "still down"
    assert error.retryable
    assert len(transport.session.calls) == 3
    assert sleeper.delays == [1.0, 1.0]


def test_validation_error_is_not_retried(make_transport, sleeper):
    transport = make_transport(
        make_response(
            400,
            {"message": "Invalid data", "errors": {"order_status": "unknown"}},
        )
    )

    with pytest.raises(SePayError) as excinfo:
        transport.get("order", {"order_status": "NOPE"})

    error = excinfo.value
    assert error.kind is ErrorKind.VALIDATION
    assert error.status_code == 400
    assert error.message == "Invalid data"
    assert error.field_errors("order_status") == ["unknown"]
    assert not error.retryable
    assert len(transport.session.calls) == 1
    assert sleeper.delays == []


def test_rate_limit_retries_then_surfaces_code(make_transport, sleeper):
    limited = make_response(429, {"message": "Too many requests"}, headers={"Retry-After": "7"})
    transport = make_transport(limited, limited, limited)

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    error = excinfo.value
    assert error.kind is ErrorKind.RATE_LIMIT
    assert error.status_code == 429
    assert error.retry_after == 7
    assert error.retryable
    assert len(transport.session.calls) == 3
    assert len(sleeper.delays) == 2


def test_rate_limit_then_success_returns_result(make_transport):
    transport = make_transport(
        make_response(429, {"message": "slow down"}),
        make_response(200, {"data": {"id": "1"}}),
    )

    assert transport.get("order/detail/1") == {"data": {"id": "1"}}
    assert len(transport.session.calls) == 2


@pytest.mark.parametrize(
    "status, kind",
    [
        (401, ErrorKind.AUTHENTICATION),
        (403, ErrorKind.GENERIC),
        (404, ErrorKind.GENERIC),
        (422, ErrorKind.GENERIC),
    ],
)
def test_other_client_errors_fail_immediately(make_transport, status, kind):
    transport = make_transport(make_response(status, {"message": "nope"}))

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.kind is kind
    assert excinfo.value.status_code == status
    assert len(transport.session.calls) == 1


def test_error_message_falls_back_to_raw_body(make_transport):
    transport = make_transport(make_response(400, text="<html>Bad Request</html>"))

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.message == "<html>Bad Request</html>"
    assert excinfo.value.details is None


def test_error_details_keep_parsed_body(make_transport):
    body = {"message": "Unauthorized", "error_code": "AUTH_FAILED"}
    transport = make_transport(make_response(401, body))

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.details == body
    assert excinfo.value.error_code == "AUTH_FAILED"


def test_connection_failures_are_retried(make_transport, sleeper):
    transport = make_transport(
        requests.ConnectionError("connection reset"),
        requests.Timeout("read timed out"),
        make_response(200, {"ok": True}),
    )

    assert transport.get("order") == {"ok": True}
    assert len(transport.session.calls) == 3
    assert sleeper.delays == [1.0, 1.0]


@pytest.mark.parametrize(
    "failure",
    [
        requests.exceptions.ChunkedEncodingError("connection broken mid-body"),
        requests.exceptions.ContentDecodingError("bad gzip stream"),
    ],
)
def test_interrupted_response_bodies_are_retried(make_transport, sleeper, failure):
    transport = make_transport(failure, make_response(200, {"ok": True}))

    assert transport.get("order") == {"ok": True}
    assert len(transport.session.calls) == 2
    assert sleeper.delays == [1.0]


def test_connection_failures_exhaust_attempts(make_transport):
    transport = make_transport(
        requests.ConnectionError("down"),
        requests.ConnectionError("down"),
    )
    transport.retry_attempts = 2

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.kind is ErrorKind.GENERIC
    assert excinfo.value.status_code == 0
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_non_transient_request_errors_are_not_retried(make_transport, sleeper):
    transport = make_transport(requests.exceptions.InvalidURL("bad url"))

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.kind is ErrorKind.GENERIC
    assert len(transport.session.calls) == 1
    assert sleeper.delays == []


def test_malformed_success_body_is_fatal(make_transport, sleeper):
    transport = make_transport(make_response(200, text="not json"))

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.kind is ErrorKind.GENERIC
    assert excinfo.value.status_code == 200
    assert len(transport.session.calls) == 1
    assert sleeper.delays == []


def test_custom_retry_settings(make_transport, sleeper):
    transport = make_transport(
        make_response(500),
        make_response(500),
        make_response(500),
        make_response(500),
        make_response(500),
        retry_attempts=5,
        retry_delay_ms=250,
        timeout=5,
    )

    with pytest.raises(SePayError) as excinfo:
        transport.get("order")

    assert excinfo.value.message == "HTTP 500"
    assert len(transport.session.calls) == 5
    assert sleeper.delays == [0.25] * 4
    assert all(call["timeout"] == 5 for call in transport.session.calls)


def test_single_attempt_never_sleeps(make_transport, sleeper):
    transport = make_transport(make_response(503), retry_attempts=1)

    with pytest.raises(SePayError):
        transport.get("order")

    assert sleeper.delays == []


def test_logging_never_includes_authorization(make_transport, caplog):
    transport = make_transport(make_response(500), make_response(200, {"ok": True}))

    with caplog.at_level(logging.DEBUG, logger="sepay_payments.core.transport"):
        transport.get("order")

    requests_logged = [r for r in caplog.records if hasattr(r, "options")]
    assert [r.attempt for r in requests_logged] == [1, 2]
    for record in requests_logged:
        assert "Authorization" not in record.options["headers"]
        assert record.options["headers"]["Accept"] == "application/json"
    assert basic_auth_header("M1", "k") not in caplog.text
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_from_config_uses_config_values(config):
    transport = Transport.from_config(config)

    assert transport.build_url("order") == "https://api.test.local/v1/order"
    assert transport.timeout == config.timeout
    assert transport.retry_attempts == config.retry_attempts
    assert transport.retry_delay_ms == config.retry_delay_ms
    assert transport.credential.merchant_id == "SP-TEST-001"
