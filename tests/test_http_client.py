"""Tests for the webhook HTTP client wrapper."""
from __future__ import annotations

import base64

import httpx

from registry_hooks.core.http import (
    TRANSPORT_ERROR_STATUS,
    WEBHOOK_TIMEOUT_SECONDS,
    OutboundRequest,
    WebhookHttpClient,
)


def _request(**overrides) -> OutboundRequest:
    fields = {
        "method": "POST",
        "url": "http://hooks.example.com/push",
        "headers": {"Content-Type": "application/json"},
        "body": b'{"action":"push"}',
    }
    fields.update(overrides)
    return OutboundRequest(**fields)


def test_default_timeout_is_sixty_seconds() -> None:
    assert _request().timeout == WEBHOOK_TIMEOUT_SECONDS == 60


def test_send_returns_status_headers_and_body(recording_handler, http_client: WebhookHttpClient) -> None:
    outcome = http_client.send(_request())

    assert outcome.status == 200
    assert outcome.body == "ok"
    assert outcome.headers["x-receiver"] == "test"
    assert outcome.transport_failed is False

    sent = recording_handler.requests[0]
    assert sent.method == "POST"
    assert sent.content == b'{"action":"push"}'
    assert sent.headers["content-type"] == "application/json"
    assert "authorization" not in sent.headers


def test_send_applies_basic_auth(recording_handler, http_client: WebhookHttpClient) -> None:
    http_client.send(_request(credentials=("alice", "s3cret")))

    expected = base64.b64encode(b"alice:s3cret").decode()
    assert recording_handler.requests[0].headers["authorization"] == f"Basic {expected}"


def test_get_requests_carry_the_body(recording_handler, http_client: WebhookHttpClient) -> None:
    http_client.send(_request(method="GET"))

    sent = recording_handler.requests[0]
    assert sent.method == "GET"
    assert sent.content == b'{"action":"push"}'


def test_http_error_status_is_an_outcome_not_an_exception() -> None:
    client = WebhookHttpClient(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))

    outcome = client.send(_request())

    assert outcome.status == 500
    assert outcome.body == "boom"
    assert outcome.error is None


def test_connection_failure_becomes_transport_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    client = WebhookHttpClient(transport=httpx.MockTransport(refuse))
    outcome = client.send(_request())

    assert outcome.status == TRANSPORT_ERROR_STATUS
    assert outcome.transport_failed is True
    assert "Connection refused" in outcome.error


def test_timeout_becomes_transport_error() -> None:
    def too_slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    client = WebhookHttpClient(transport=httpx.MockTransport(too_slow))
    outcome = client.send(_request())

    assert outcome.status == TRANSPORT_ERROR_STATUS
    assert outcome.error.startswith("Request timed out after 60")


def test_closed_client_refuses_new_requests(recording_handler, http_client: WebhookHttpClient) -> None:
    http_client.close()

    outcome = http_client.send(_request())

    assert http_client.is_closed
    assert outcome.transport_failed
    assert recording_handler.requests == []


def test_unencodable_header_becomes_error_outcome(recording_handler, http_client: WebhookHttpClient) -> None:
    outcome = http_client.send(_request(headers={"X-Team": "café"}))

    assert outcome.status == TRANSPORT_ERROR_STATUS
    assert outcome.transport_failed
    assert outcome.error.startswith("Unexpected error:")
    assert recording_handler.requests == []


def test_malformed_url_becomes_error_outcome(recording_handler, http_client: WebhookHttpClient) -> None:
    outcome = http_client.send(_request(url="http://hooks.example.com:abc/push"))

    assert outcome.status == TRANSPORT_ERROR_STATUS
    assert outcome.transport_failed
    assert recording_handler.requests == []
