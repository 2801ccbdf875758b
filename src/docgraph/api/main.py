"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from docgraph import __version__
from docgraph.api.routers import health, knowledge
from docgraph.config import configure_logging, get_settings
from docgraph.core.exceptions import (
    DocGraphError,
    EmbeddingGenerationError,
    ExtractionError,
    GraphStoreError,
    NodeNotFoundError,
    UnsupportedDocumentTypeError,
    ValidationError,
)
from docgraph.factory import ServiceFactory

logger = structlog.get_logger(__name__)

# Most specific first
ERROR_STATUS: list[tuple[type[DocGraphError], int]] = [
    (NodeNotFoundError, status.HTTP_404_NOT_FOUND),
    (UnsupportedDocumentTypeError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ExtractionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (EmbeddingGenerationError, status.HTTP_502_BAD_GATEWAY),
    (GraphStoreError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: DocGraphError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if getattr(app.state, "factory", None) is None:
        settings = get_settings()
        configure_logging(settings.log_level, json_logs=settings.log_format == "json")
        app.state.factory = ServiceFactory(settings)
    logger.info("api.startup")
    try:
        yield
    finally:
        await app.state.factory.close()
        logger.info("api.shutdown")


def create_app(factory: ServiceFactory | None = None) -> FastAPI:
    """Create the API application.

    Args:
        factory: Pre-built factory; one is created from settings at
            startup when omitted.
    """
    app = FastAPI(
        title="docgraph",
        version=__version__,
        description="Document ingestion into a searchable knowledge graph",
        lifespan=lifespan,
    )
    app.state.factory = factory

    @app.exception_handler(DocGraphError)
    async def docgraph_error_handler(request: Request, exc: DocGraphError) -> JSONResponse:
        code = status_for(exc)
        logger.warning(
            "api.error",
            path=request.url.path,
            error_type=exc.__class__.__name__,
            error=exc.message,
            status=code,
        )
        return JSONResponse(
            status_code=code,
            content={"error": exc.message, "type": exc.__class__.__name__, "details": exc.details},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(knowledge.router, prefix="/knowledge", tags=["knowledge"])
    return app


app = create_app()
