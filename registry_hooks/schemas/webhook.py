"""Pydantic schemas for webhook resources."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from registry_hooks.core.urls import normalize_webhook_url
from registry_hooks.models.webhook import ContentType, RequestMethod


class WebhookBase(BaseModel):
    """Shared attributes for webhook payloads."""

    url: str = Field(description="Target URL; http:// is assumed when no scheme is given")
    request_method: RequestMethod = Field(default=RequestMethod.POST, description="HTTP method used to call the webhook")
    content_type: ContentType = Field(default=ContentType.JSON, description="Content-Type sent with every request")
    username: str = Field(default="", description="Basic auth username (ignored unless a password is set too)")
    enabled: bool = Field(default=False, description="Whether the webhook is active")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Normalize the URL and make sure it is an absolute HTTP/HTTPS URL."""
        return normalize_webhook_url(value)


class WebhookCreate(WebhookBase):
    """Payload used when creating a webhook."""

    password: str = Field(default="", description="Basic auth password (ignored unless a username is set too)")


class WebhookUpdate(BaseModel):
    """Payload used when updating a webhook (all fields optional)."""

    url: str | None = Field(default=None, description="Target URL")
    request_method: RequestMethod | None = Field(default=None, description="HTTP method used to call the webhook")
    content_type: ContentType | None = Field(default=None, description="Content-Type sent with every request")
    username: str | None = Field(default=None, description="Basic auth username; empty string clears it")
    password: str | None = Field(default=None, description="Basic auth password; empty string clears it")
    enabled: bool | None = Field(default=None, description="Whether the webhook is active")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str | None) -> str | None:
        """Normalize the URL when one is provided."""
        if value is None:
            return value
        return normalize_webhook_url(value)


class WebhookResponse(WebhookBase):
    """Response model returned by API endpoints."""

    id: int = Field(description="Database identifier")
    namespace_id: int = Field(description="Owning namespace")
    host: str | None = Field(description="Hostname the webhook points at")
    has_credentials: bool = Field(description="Whether requests carry basic auth")
    created_at: datetime = Field(description="Timestamp when the webhook was created")
    updated_at: datetime = Field(description="Timestamp when the webhook was last updated")

    model_config = ConfigDict(from_attributes=True)


class WebhookHeaderCreate(BaseModel):
    """Payload used when adding a custom header to a webhook."""

    name: str = Field(min_length=1, description="Header name")
    value: str = Field(description="Header value")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Reject names that cannot be sent as an HTTP header."""
        value = value.strip()
        if not value or not value.isascii() or any(ch in value for ch in ":\r\n\t "):
            raise ValueError("Header name must be a non-empty token without ':' or whitespace")
        return value

    @field_validator("value")
    @classmethod
    def validate_value(cls, value: str) -> str:
        """Header values go on the wire as ASCII and must stay on one line."""
        if not value.isascii() or any(ch in value for ch in "\r\n\0"):
            raise ValueError("Header value must be ASCII without line breaks")
        return value


class WebhookHeaderResponse(BaseModel):
    """Custom header as returned by the API."""

    id: int = Field(description="Database identifier")
    webhook_id: int = Field(description="Owning webhook")
    name: str = Field(description="Header name")
    value: str = Field(description="Header value")

    model_config = ConfigDict(from_attributes=True)


class WebhookDeliveryResponse(BaseModel):
    """Response model for webhook delivery history."""

    id: int = Field(description="Database identifier")
    webhook_id: int = Field(description="Associated webhook ID")
    uuid: str = Field(description="Delivery token, unique per webhook")
    status: int = Field(description="HTTP status code received (0 when the request never completed)")
    success: bool = Field(description="Whether the endpoint answered 200")
    request_header: dict[str, Any] = Field(description="Headers as sent")
    request_body: str = Field(description="Body as sent")
    response_header: dict[str, Any] = Field(description="Headers received")
    response_body: str = Field(description="Body received")
    error_message: str | None = Field(default=None, description="Transport error, if the request failed")
    created_at: datetime = Field(description="When the delivery was first made")
    updated_at: datetime = Field(description="When the delivery was last (re)delivered")

    model_config = ConfigDict(from_attributes=True)


class RedeliveryResponse(BaseModel):
    """Result of replaying a delivery."""

    delivered: bool = Field(description="Whether the endpoint could be reached")
    error: str | None = Field(default=None, description="Transport error when the endpoint could not be reached")
    delivery: WebhookDeliveryResponse = Field(description="The delivery after replay")
