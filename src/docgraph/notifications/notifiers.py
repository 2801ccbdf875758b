"""Progress notifier implementations."""

import httpx
import structlog

from docgraph.core.interfaces.notifier import ProgressNotifier
from docgraph.core.models.progress import ProgressStatus, ProgressUpdate

logger = structlog.get_logger(__name__)


class LoggingProgressNotifier:
    """Writes progress updates to the structured log."""

    async def notify(self, update: ProgressUpdate) -> None:
        logger.info(
            "progress.update",
            document_id=update.document_id,
            status=update.status,
            progress=update.progress,
            message=update.message,
        )


class WebhookProgressNotifier:
    """POSTs each progress update as JSON to a webhook URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def notify(self, update: ProgressUpdate) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._url, json=update.model_dump(mode="json"))
            response.raise_for_status()


async def notify_safely(
    notifier: ProgressNotifier | None,
    document_id: str,
    status: ProgressStatus,
    progress: int,
    message: str,
) -> None:
    """Send a progress update, logging and discarding any notifier failure."""
    if notifier is None:
        return
    update = ProgressUpdate(
        document_id=document_id,
        status=status,
        progress=max(0, min(100, progress)),
        message=message,
    )
    try:
        await notifier.notify(update)
    except Exception as exc:
        logger.warning(
            "progress.notify_failed",
            document_id=document_id,
            status=status,
            error=str(exc),
        )
