"""Progress notifications."""

from docgraph.notifications.notifiers import (
    LoggingProgressNotifier,
    WebhookProgressNotifier,
    notify_safely,
)

__all__ = ["LoggingProgressNotifier", "WebhookProgressNotifier", "notify_safely"]
