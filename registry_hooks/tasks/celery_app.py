"""Celery application for background webhook dispatch."""

from celery import Celery

from registry_hooks.core.config import get_settings
from registry_hooks.core.logging_config import configure_logging

settings = get_settings()
configure_logging()

# Create Celery app instance
celery_app = Celery(
    "registry_hooks",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

# Load configuration from celery_config module
celery_app.config_from_object("registry_hooks.tasks.celery_config")

# Auto-discover tasks from registry_hooks.tasks module
celery_app.autodiscover_tasks(["registry_hooks.tasks"], related_name="webhook_tasks")

# Configure broker connection with retry and health check settings
celery_app.conf.update(
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
)


def get_celery_app() -> Celery:
    """Return the configured Celery application instance.
    
    Useful for dependency injection in tests and for explicit imports.
    """
    return celery_app
