"""Base class for extraction strategies."""

from abc import ABC, abstractmethod

from docgraph.core.interfaces.notifier import ProgressNotifier
from docgraph.core.models.extraction import (
    DocumentType,
    ExtractionOptions,
    ExtractionResult,
    ExtractionSource,
)
from docgraph.notifications import notify_safely


class BaseExtractionStrategy(ABC):
    """Common plumbing for strategies: progress reporting.

    Subclasses implement ``try_extract`` and must return failures as
    ``ExtractionResult.failure(...)`` rather than raising.
    """

    name: str = "base"
    document_types: frozenset[DocumentType] = frozenset()

    def __init__(self, notifier: ProgressNotifier | None = None) -> None:
        self._notifier = notifier

    def handles(self, document_type: DocumentType) -> bool:
        return document_type in self.document_types

    @abstractmethod
    async def try_extract(
        self,
        source: ExtractionSource,
        options: ExtractionOptions,
    ) -> ExtractionResult: ...

    async def _progress(self, source: ExtractionSource, progress: int, message: str) -> None:
        await notify_safely(self._notifier, source.document_id, "processing", progress, message)
