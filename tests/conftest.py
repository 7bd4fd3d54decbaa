"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os

# Settings are read at import time; point them at in-process backends
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

from typing import Any, Callable, Generator

import httpx
import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from registry_hooks.core.db import build_engine
from registry_hooks.core.http import WebhookHttpClient
from registry_hooks.models import Base
from registry_hooks.models.namespace import Namespace, Registry
from registry_hooks.models.webhook import Webhook
from registry_hooks.schemas.webhook import WebhookCreate, WebhookHeaderCreate
from registry_hooks.services.namespace_repository import NamespaceRepository
from registry_hooks.services.webhook_repository import WebhookRepository

REGISTRY_HOST = "registry.local:5000"


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared by every connection of a test."""
    engine = build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    
    yield engine
    
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing."""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def registry(db_session: Session) -> Registry:
    return NamespaceRepository(db_session).create_registry("registry", REGISTRY_HOST)


@pytest.fixture
def namespace(db_session: Session, registry: Registry) -> Namespace:
    return NamespaceRepository(db_session).create_namespace(registry.id, "team")


@pytest.fixture
def make_webhook(db_session: Session, namespace: Namespace) -> Callable[..., Webhook]:
    """Factory creating webhooks on the ``team`` namespace."""

    def _make(
        url: str = "http://hooks.example.com/push",
        *,
        enabled: bool = True,
        headers: dict[str, str] | None = None,
        namespace_id: int | None = None,
        **fields: Any,
    ) -> Webhook:
        repo = WebhookRepository(db_session)
        webhook = repo.create(namespace_id or namespace.id, WebhookCreate(url=url, enabled=enabled, **fields))
        for name, value in (headers or {}).items():
            repo.add_header(webhook.id, WebhookHeaderCreate(name=name, value=value))
        return webhook

    return _make


@pytest.fixture
def push_event() -> dict[str, Any]:
    """A push notification as sent by the registry."""
    return {
        "id": "8b5ba1c4-2d8a-4c3e-9a0e-6d1c2a7c5f10",
        "timestamp": "2026-10-19T10:15:30.123456789Z",
        "action": "push",
        "target": {
            "mediaType": "application/vnd.docker.distribution.manifest.v2+json",
            "size": 708,
            "digest": "sha256:fea8895f450959fa676bcc1df0611ea93823a735a01205fd8622846041d0c7cf",
            "length": 708,
            "repository": "team/app",
            "url": f"http://{REGISTRY_HOST}/v2/team/app/manifests/sha256:fea8895f",
            "tag": "latest",
        },
        "request": {
            "id": "3cb8bb4a-1f05-4f1f-9c0c-65b7d1d6e6c2",
            "addr": "172.17.0.1:51234",
            "host": REGISTRY_HOST,
            "method": "PUT",
            "useragent": "docker/24.0.7",
        },
        "actor": {"name": "alice"},
        "source": {"addr": "registry:5000", "instanceID": "b1c6e0e3"},
    }


class RecordingHandler:
    """MockTransport handler that remembers requests and answers with a fixed status."""

    def __init__(self, status_code: int = 200, body: str = "ok") -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body, headers={"X-Receiver": "test"})


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def http_client(recording_handler: RecordingHandler) -> Generator[WebhookHttpClient, None, None]:
    """Webhook HTTP client that never leaves the process."""
    client = WebhookHttpClient(transport=httpx.MockTransport(recording_handler))
    yield client
    client.close()
