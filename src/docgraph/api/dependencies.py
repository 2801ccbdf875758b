"""FastAPI dependencies."""

from fastapi import Request

from docgraph.config import get_settings
from docgraph.factory import ServiceFactory
from docgraph.pipelines.ingestion import IngestionPipeline
from docgraph.services import KnowledgeService


def get_factory(request: Request) -> ServiceFactory:
    """Application-wide factory, created from settings on first use."""
    if getattr(request.app.state, "factory", None) is None:
        request.app.state.factory = ServiceFactory(get_settings())
    return request.app.state.factory


async def get_knowledge_service(request: Request) -> KnowledgeService:
    return await get_factory(request).get_knowledge_service()


async def get_ingestion_pipeline(request: Request) -> IngestionPipeline:
    return await get_factory(request).get_ingestion_pipeline()
