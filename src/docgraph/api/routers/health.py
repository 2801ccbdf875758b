"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from docgraph.api.dependencies import get_factory
from docgraph.factory import ServiceFactory

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(
    factory: ServiceFactory = Depends(get_factory),
) -> dict[str, Any]:
    """Readiness check - verifies the graph store answers queries.

    The structured-extraction service is reported but optional, since
    extraction falls back to local strategies without it.
    """
    checks: dict[str, Any] = {}
    errors: dict[str, str] = {}

    try:
        store = await factory.get_graph_store()
        checks["graph"] = "ok"
        checks["nodes"] = await store.count_nodes()
    except Exception as exc:
        errors["graph"] = exc.__class__.__name__

    if factory.settings.structured_extraction_enabled:
        available = await factory.get_structured_client().is_available()
        checks["structured_extraction"] = "ok" if available else "unavailable"
    else:
        checks["structured_extraction"] = "skipped"

    if errors:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "error", "checks": {**checks, **errors}},
        )

    return {"status": "ok", "checks": checks}


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness check - verifies the service is running."""
    return {"status": "ok"}


@router.get("/health/extraction")
async def extraction_health(
    factory: ServiceFactory = Depends(get_factory),
) -> dict[str, Any]:
    """Structured-extraction service health with response time."""
    if not factory.settings.structured_extraction_enabled:
        return {"status": "disabled"}
    return await factory.get_structured_client().check_health()
