"""Entrypoint for the FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from registry_hooks.api import events, health, webhooks
from registry_hooks.core.config import get_settings
from registry_hooks.core.http import shutdown_http_client
from registry_hooks.core.logging_config import configure_logging

settings = get_settings()
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Outstanding webhook requests resolve as transport failures once closed
    shutdown_http_client()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Registry webhook dispatch with delivery history and replay",
    lifespan=lifespan,
)

# Register API routers
app.include_router(health.router)  # Health checks at root level
app.include_router(events.router, prefix=settings.api_prefix)
app.include_router(webhooks.router, prefix=settings.api_prefix)
