"""Progress notifier protocol."""

from typing import Protocol

from docgraph.core.models.progress import ProgressUpdate


class ProgressNotifier(Protocol):
    """Receives progress updates. Delivery is fire-and-forget."""

    async def notify(self, update: ProgressUpdate) -> None: ...
