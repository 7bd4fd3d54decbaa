"""Health check endpoints for the API and its dependencies."""
from typing import Any

from fastapi import APIRouter
from sqlalchemy import text

from registry_hooks.core.db import engine
from registry_hooks.core.http import get_http_client
from registry_hooks.core.redis_manager import get_redis_client
from registry_hooks.tasks.celery_app import celery_app

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check endpoint for load balancers."""
    return {"status": "ok"}


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """Detailed health check for all service dependencies.
    
    Checks:
    - Database connectivity (webhook configuration and deliveries)
    - Redis connectivity (Celery result backend)
    - Celery worker availability (webhook dispatch)
    - Outbound webhook HTTP client state
    
    Returns:
        Detailed health status for each component
    """
    components: dict[str, dict[str, Any]] = {}
    overall = "healthy"

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        components["database"] = {"status": "healthy", "message": "Database connection successful"}
    except Exception as e:
        overall = "unhealthy"
        components["database"] = {"status": "unhealthy", "message": f"Database connection failed: {e}"}

    try:
        redis_client = get_redis_client()
        await redis_client.ping()
        await redis_client.aclose()
        components["redis"] = {"status": "healthy", "message": "Redis connection successful"}
    except Exception as e:
        overall = "unhealthy"
        components["redis"] = {"status": "unhealthy", "message": f"Redis connection failed: {e}"}

    try:
        active_workers = celery_app.control.inspect(timeout=2.0).active()
        if active_workers:
            components["celery"] = {
                "status": "healthy",
                "message": f"{len(active_workers)} worker(s) available",
                "workers": list(active_workers.keys()),
            }
        else:
            overall = "degraded" if overall == "healthy" else overall
            components["celery"] = {"status": "degraded", "message": "No active Celery workers found"}
    except Exception as e:
        overall = "degraded" if overall == "healthy" else overall
        components["celery"] = {"status": "degraded", "message": f"Failed to inspect Celery workers: {e}"}

    if get_http_client().is_closed:
        overall = "unhealthy"
        components["webhook_http_client"] = {"status": "unhealthy", "message": "HTTP client is shut down"}
    else:
        components["webhook_http_client"] = {"status": "healthy", "message": "Accepting webhook requests"}

    return {"status": overall, "components": components}
