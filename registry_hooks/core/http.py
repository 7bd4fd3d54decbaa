"""Outbound HTTP for webhook deliveries.

A single ``WebhookHttpClient`` is created per process and shared by the
fan-out dispatcher and the redelivery engine. Tests pass an
``httpx.MockTransport`` instead of talking to the network.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import httpx

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 60
MAX_RESPONSE_BODY_LENGTH = 65535
TRANSPORT_ERROR_STATUS = 0


def canonical_json(value: Any) -> str:
    """Serialize an event the same way for dispatch and redelivery."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class OutboundRequest:
    """Fully specified webhook request, ready to be sent."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes
    timeout: float = WEBHOOK_TIMEOUT_SECONDS
    credentials: tuple[str, str] | None = None


@dataclass(frozen=True)
class DeliveryOutcome:
    """What came back from a webhook endpoint.

    Transport failures (timeouts, refused connections, a closed client)
    carry ``TRANSPORT_ERROR_STATUS`` and the error text in ``error``.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    error: str | None = None
    elapsed_ms: int | None = None

    @property
    def transport_failed(self) -> bool:
        return self.error is not None

    @classmethod
    def from_error(cls, error: str, elapsed_ms: int | None = None) -> "DeliveryOutcome":
        return cls(status=TRANSPORT_ERROR_STATUS, error=error[:MAX_RESPONSE_BODY_LENGTH], elapsed_ms=elapsed_ms)


class WebhookHttpClient:
    """Thread-safe wrapper around an ``httpx.Client`` for webhook calls."""

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        # No connection cap: fan-out width is the number of webhooks of a namespace
        self._client = httpx.Client(
            transport=transport,
            timeout=WEBHOOK_TIMEOUT_SECONDS,
            follow_redirects=False,
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=20),
        )
        self._closed = threading.Event()

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set()

    def send(self, request: OutboundRequest) -> DeliveryOutcome:
        """Issue ``request`` and return its outcome; never raises."""
        if self.is_closed:
            return DeliveryOutcome.from_error("HTTP client is shut down")

        start_time = time.monotonic()
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
                auth=request.credentials,
                timeout=request.timeout,
            )
        except httpx.TimeoutException as e:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.warning(f"Webhook request to {request.url} timed out after {request.timeout}s")
            return DeliveryOutcome.from_error(f"Request timed out after {request.timeout}s: {e}", elapsed_ms)
        except httpx.RequestError as e:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.warning(f"Webhook request to {request.url} failed: {e}")
            return DeliveryOutcome.from_error(f"Request failed: {e}", elapsed_ms)
        except Exception as e:
            # httpx raises RuntimeError when the client was closed mid-flight
            if self.is_closed:
                return DeliveryOutcome.from_error("HTTP client is shut down")
            # Invalid URLs or header values surface here, while the request is encoded
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.error(f"Webhook request to {request.url} could not be sent: {e}", exc_info=True)
            return DeliveryOutcome.from_error(f"Unexpected error: {e}", elapsed_ms)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"Webhook {request.method} {request.url} answered {response.status_code} in {elapsed_ms}ms"
        )
        return DeliveryOutcome(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.text[:MAX_RESPONSE_BODY_LENGTH],
            elapsed_ms=elapsed_ms,
        )

    def close(self) -> None:
        """Stop accepting requests and release pooled connections."""
        if self.is_closed:
            return
        self._closed.set()
        self._client.close()

    def __enter__(self) -> "WebhookHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@lru_cache
def get_http_client() -> WebhookHttpClient:
    """Return the process-wide webhook HTTP client."""

    return WebhookHttpClient()


def shutdown_http_client() -> None:
    """Close the process-wide client if it was ever created."""

    if get_http_client.cache_info().currsize:
        get_http_client().close()
        get_http_client.cache_clear()
