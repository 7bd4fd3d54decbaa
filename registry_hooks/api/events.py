"""Endpoint receiving notifications from the container registry."""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import ValidationError

from registry_hooks.schemas.event import NotificationAccepted, RegistryNotification
from registry_hooks.services.webhook_service import RegistryEventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registry", tags=["registry"])


@router.post(
    "/events",
    response_model=NotificationAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Receive registry notifications",
    description=(
        "Registry notification endpoint. Push events are queued for dispatch to the "
        "webhooks of the namespace they belong to; other events are ignored."
    ),
)
async def receive_events(request: Request) -> NotificationAccepted:
    """
    Accept a registry notification envelope.

    The registry sends ``application/vnd.docker.distribution.events.v1+json``,
    so the body is parsed by hand instead of relying on the JSON content type.
    """
    raw = await request.body()
    try:
        notification = RegistryNotification.model_validate(json.loads(raw or b"{}"))
    except (json.JSONDecodeError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid registry notification: {e}",
        ) from e

    accepted = RegistryEventService().publish_push_events(notification.events)
    return NotificationAccepted(accepted=accepted)
