"""Service factory wiring settings into stores, providers and pipelines."""

from typing import TYPE_CHECKING

import structlog

from docgraph.chunking import Chunker, ChunkingConfig
from docgraph.core.interfaces.embedding import EmbeddingProvider
from docgraph.core.interfaces.notifier import ProgressNotifier
from docgraph.core.interfaces.stores import GraphStore
from docgraph.core.models.extraction import ExtractionOptions
from docgraph.embedding import create_embedding_provider
from docgraph.extraction import (
    OcrStrategy,
    PdfStrategy,
    PlainTextStrategy,
    StructuredExtractionClient,
    StructuredExtractionStrategy,
    TextExtractor,
)
from docgraph.notifications import LoggingProgressNotifier, WebhookProgressNotifier
from docgraph.pipelines.ingestion import IngestionPipeline, KnowledgeGraphBuilder
from docgraph.services import KnowledgeService
from docgraph.stores import create_graph_store

if TYPE_CHECKING:
    from docgraph.config.settings import Settings

logger = structlog.get_logger(__name__)


class ServiceFactory:
    """Creates and owns the long-lived components of a docgraph session.

    The graph store is opened on first use and closed by ``close()``.
    Components may be injected (tests pass an in-memory store and a fake
    embedder).
    """

    def __init__(
        self,
        settings: "Settings",
        store: GraphStore | None = None,
        embedder: EmbeddingProvider | None = None,
        notifier: ProgressNotifier | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._store_opened = False
        self._embedder = embedder
        self._notifier = notifier
        self._structured_client: StructuredExtractionClient | None = None
        self._knowledge: KnowledgeService | None = None
        self._pipeline: IngestionPipeline | None = None

    @property
    def settings(self) -> "Settings":
        return self._settings

    async def get_graph_store(self) -> GraphStore:
        """Get or create the graph store, opening it once."""
        if self._store is None:
            self._store = create_graph_store(self._settings)
        if not self._store_opened:
            await self._store.open()
            self._store_opened = True
        return self._store

    def get_embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            self._embedder = create_embedding_provider(self._settings)
            logger.info(
                "Embedding provider created",
                provider=self._settings.embedding_provider,
                model=self._embedder.model_id,
            )
        return self._embedder

    def get_notifier(self) -> ProgressNotifier:
        if self._notifier is None:
            if self._settings.progress_webhook_url:
                self._notifier = WebhookProgressNotifier(self._settings.progress_webhook_url)
            else:
                self._notifier = LoggingProgressNotifier()
        return self._notifier

    def get_structured_client(self) -> StructuredExtractionClient:
        if self._structured_client is None:
            self._structured_client = StructuredExtractionClient(
                endpoint=self._settings.structured_extraction_url,
                api_key=self._settings.structured_extraction_api_key,
                health_timeout=self._settings.structured_extraction_timeout,
            )
        return self._structured_client

    def create_extractor(self) -> TextExtractor:
        notifier = self.get_notifier()
        structured = None
        if self._settings.structured_extraction_enabled:
            structured = StructuredExtractionStrategy(self.get_structured_client(), notifier)
        return TextExtractor(
            strategies=[
                PlainTextStrategy(notifier),
                PdfStrategy(notifier),
                OcrStrategy(notifier),
            ],
            structured=structured,
            notifier=notifier,
        )

    def chunking_config(self) -> ChunkingConfig:
        return ChunkingConfig(
            chunk_size=self._settings.chunk_size,
            chunk_overlap=self._settings.chunk_overlap,
            max_chunks=self._settings.max_chunks,
        )

    def extraction_options(self) -> ExtractionOptions:
        return ExtractionOptions(
            languages=self._settings.ocr_languages,
            max_pages=self._settings.max_pages,
        )

    async def get_knowledge_service(self) -> KnowledgeService:
        if self._knowledge is None:
            store = await self.get_graph_store()
            self._knowledge = KnowledgeService(store, self.get_embedder())
        return self._knowledge

    async def get_ingestion_pipeline(self) -> IngestionPipeline:
        if self._pipeline is None:
            builder = KnowledgeGraphBuilder(
                await self.get_knowledge_service(),
                chunker=Chunker(self.chunking_config()),
                content_preview_length=self._settings.content_preview_length,
            )
            self._pipeline = IngestionPipeline(
                self.create_extractor(),
                builder,
                max_upload_size_bytes=self._settings.max_upload_size_bytes,
                extraction_defaults=self.extraction_options(),
            )
        return self._pipeline

    async def close(self) -> None:
        """Close the graph store and drop cached components."""
        if self._store is not None and self._store_opened:
            await self._store.close()
        self._store_opened = False
        self._knowledge = None
        self._pipeline = None
