"""Webhook configuration, delivery history and redelivery API endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from registry_hooks.core.db import get_session
from registry_hooks.core.http import WebhookHttpClient, get_http_client
from registry_hooks.models.namespace import Namespace
from registry_hooks.models.webhook import Webhook
from registry_hooks.schemas.webhook import (
    RedeliveryResponse,
    WebhookCreate,
    WebhookDeliveryResponse,
    WebhookHeaderCreate,
    WebhookHeaderResponse,
    WebhookResponse,
    WebhookUpdate,
)
from registry_hooks.services.namespace_repository import NamespaceRepository
from registry_hooks.services.redelivery import DeliveryConflictError, RedeliveryService
from registry_hooks.services.webhook_repository import WebhookRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/namespaces/{namespace_id}/webhooks", tags=["webhooks"])


def get_webhook_repository(session: Session = Depends(get_session)) -> WebhookRepository:
    """Dependency to get WebhookRepository instance."""
    return WebhookRepository(session)


def get_namespace(namespace_id: int, session: Session = Depends(get_session)) -> Namespace:
    """Dependency resolving the namespace from the path, 404 when unknown."""
    namespace = NamespaceRepository(session).get_by_id(namespace_id)
    if namespace is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Namespace with ID {namespace_id} not found",
        )
    return namespace


def get_webhook(
    webhook_id: int,
    namespace: Namespace = Depends(get_namespace),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> Webhook:
    """Dependency resolving a webhook of the namespace, 404 when unknown."""
    webhook = repository.get_for_namespace(namespace.id, webhook_id)
    if webhook is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Webhook with ID {webhook_id} not found",
        )
    return webhook


@router.get(
    "",
    response_model=list[WebhookResponse],
    status_code=status.HTTP_200_OK,
    summary="List webhooks of a namespace",
)
async def list_webhooks(
    namespace: Namespace = Depends(get_namespace),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> list[WebhookResponse]:
    """List all webhooks of a namespace, newest first."""
    webhooks = repository.list_for_namespace(namespace.id)
    return [WebhookResponse.model_validate(w) for w in webhooks]


@router.post(
    "",
    response_model=WebhookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new webhook",
    description="Register a webhook on the namespace. URLs without a scheme are stored as http://.",
)
async def create_webhook(
    webhook: WebhookCreate,
    namespace: Namespace = Depends(get_namespace),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> WebhookResponse:
    """
    Create a new webhook.

    Args:
        webhook: WebhookCreate schema with webhook data
        namespace: Owning namespace (injected)
        repository: WebhookRepository instance (injected)

    Returns:
        Created WebhookResponse
    """
    try:
        created_webhook = repository.create(namespace.id, webhook)
        logger.info(f"Created webhook {created_webhook.id} on namespace {namespace.id} ({created_webhook.host})")
        return WebhookResponse.model_validate(created_webhook)
    except Exception as e:
        logger.exception(f"Unexpected error creating webhook: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create webhook",
        ) from e


@router.get(
    "/{webhook_id}",
    response_model=WebhookResponse,
    status_code=status.HTTP_200_OK,
    summary="Get webhook by ID",
)
async def read_webhook(webhook: Webhook = Depends(get_webhook)) -> WebhookResponse:
    """Get a webhook of the namespace by ID."""
    return WebhookResponse.model_validate(webhook)


@router.put(
    "/{webhook_id}",
    response_model=WebhookResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a webhook",
    description="Update a webhook by ID. All fields in WebhookUpdate are optional.",
)
async def update_webhook(
    changes: WebhookUpdate,
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> WebhookResponse:
    """
    Update a webhook by ID.

    Later deliveries and redeliveries use the new configuration.

    Raises:
        HTTPException: 404 if webhook not found
    """
    try:
        updated_webhook = repository.update(webhook.id, changes)
        if updated_webhook is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Webhook with ID {webhook.id} not found",
            )
        return WebhookResponse.model_validate(updated_webhook)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error updating webhook {webhook.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update webhook",
        ) from e


@router.delete(
    "/{webhook_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a webhook by ID",
    description="Delete a webhook with its headers and deliveries. Returns 204 No Content on success.",
)
async def delete_webhook(
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> None:
    """Delete a webhook by ID."""
    repository.delete(webhook.id)
    logger.info(f"Deleted webhook {webhook.id}")


@router.get(
    "/{webhook_id}/headers",
    response_model=list[WebhookHeaderResponse],
    status_code=status.HTTP_200_OK,
    summary="List custom headers of a webhook",
)
async def list_headers(
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> list[WebhookHeaderResponse]:
    return [WebhookHeaderResponse.model_validate(h) for h in repository.list_headers(webhook.id)]


@router.post(
    "/{webhook_id}/headers",
    response_model=WebhookHeaderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a custom header",
    description="Header sent with every request of the webhook. A Content-Type header overrides the configured one.",
)
async def create_header(
    header: WebhookHeaderCreate,
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
    session: Session = Depends(get_session),
) -> WebhookHeaderResponse:
    """
    Add a custom header to a webhook.

    Raises:
        HTTPException: 409 if the webhook already has a header with that name
    """
    try:
        created = repository.add_header(webhook.id, header)
    except IntegrityError as e:
        session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Header {header.name!r} already exists on webhook {webhook.id}",
        ) from e
    return WebhookHeaderResponse.model_validate(created)


@router.delete(
    "/{webhook_id}/headers/{header_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a custom header",
)
async def delete_header(
    header_id: int,
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> None:
    if not repository.delete_header(webhook.id, header_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Header with ID {header_id} not found",
        )


@router.get(
    "/{webhook_id}/deliveries",
    response_model=list[WebhookDeliveryResponse],
    status_code=status.HTTP_200_OK,
    summary="Get webhook delivery history",
    description="Retrieve delivery history for a webhook with pagination.",
)
async def get_webhook_deliveries(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(default=50, ge=1, le=100, description="Items per page (max 100)"),
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
) -> list[WebhookDeliveryResponse]:
    """
    Get delivery history for a webhook, newest first.

    Args:
        page: Page number (default: 1)
        page_size: Items per page (default: 50, max: 100)
    """
    offset = (page - 1) * page_size
    deliveries, _total = repository.get_deliveries_for_webhook(webhook.id, limit=page_size, offset=offset)
    
    return [WebhookDeliveryResponse.model_validate(d) for d in deliveries]


@router.put(
    "/{webhook_id}/deliveries/{delivery_id}",
    response_model=RedeliveryResponse,
    status_code=status.HTTP_200_OK,
    summary="Redeliver a webhook delivery",
    description=(
        "Send the original request body again, synchronously, using the webhook's current "
        "headers and credentials. The delivery's response fields are overwritten."
    ),
)
def redeliver(
    delivery_id: int,
    webhook: Webhook = Depends(get_webhook),
    repository: WebhookRepository = Depends(get_webhook_repository),
    session: Session = Depends(get_session),
    http_client: WebhookHttpClient = Depends(get_http_client),
) -> RedeliveryResponse:
    """
    Replay a delivery.

    Runs in FastAPI's threadpool since the request blocks for up to 60s.

    Raises:
        HTTPException: 404 if the delivery is unknown, 409 if it was replayed concurrently
    """
    delivery = repository.get_delivery(webhook.id, delivery_id)
    if delivery is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Delivery with ID {delivery_id} not found",
        )

    try:
        result = RedeliveryService(session, http_client).redeliver(delivery)
    except DeliveryConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return RedeliveryResponse(
        delivered=result.delivered,
        error=result.outcome.error,
        delivery=WebhookDeliveryResponse.model_validate(result.delivery),
    )
