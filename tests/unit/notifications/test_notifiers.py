"""Tests for progress notifiers."""

import json

import httpx
import pytest
from conftest import BrokenNotifier, RecordingNotifier

from docgraph.notifications import WebhookProgressNotifier, notify_safely


@pytest.mark.unit
class TestNotifySafely:
    async def test_clamps_progress(self, notifier: RecordingNotifier) -> None:
        await notify_safely(notifier, "doc-1", "processing", 150, "almost")
        await notify_safely(notifier, "doc-1", "processing", -5, "starting")

        assert [u.progress for u in notifier.updates] == [100, 0]
        assert notifier.updates[0].document_id == "doc-1"

    async def test_failures_are_swallowed(self) -> None:
        await notify_safely(BrokenNotifier(), "doc-1", "failed", 0, "boom")

    async def test_no_notifier(self) -> None:
        await notify_safely(None, "doc-1", "completed", 100, "done")


@pytest.mark.unit
class TestWebhookProgressNotifier:
    async def test_posts_update_json(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(204)

        notifier = WebhookProgressNotifier(
            "http://hooks.local/progress", transport=httpx.MockTransport(handler)
        )
        await notify_safely(notifier, "doc-1", "completed", 100, "Document processed successfully")

        assert bodies[0]["document_id"] == "doc-1"
        assert bodies[0]["status"] == "completed"
        assert bodies[0]["progress"] == 100

    async def test_http_error_does_not_propagate(self) -> None:
        notifier = WebhookProgressNotifier(
            "http://hooks.local/progress",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        await notify_safely(notifier, "doc-1", "failed", 0, "boom")
