"""HTTP client for the structured-extraction (partition) service."""

import time
from typing import Any

import httpx
import structlog

from docgraph.core.models.extraction import (
    ElementType,
    ExtractionOptions,
    StructuredElement,
)

logger = structlog.get_logger(__name__)

PARTITION_PATH = "/general/v0/general"
HEALTH_PATH = "/health"


class StructuredExtractionClient:
    """Posts files to a partition endpoint and parses the element list.

    The service answers with a JSON array of ``{type, element_id, text,
    metadata}`` objects.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        health_timeout: float = 5.0,
        request_timeout: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._health_timeout = health_timeout
        self._request_timeout = request_timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def health_endpoint(self) -> str:
        if PARTITION_PATH in self._endpoint:
            return self._endpoint.replace(PARTITION_PATH, HEALTH_PATH)
        return self._endpoint.rstrip("/") + HEALTH_PATH

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @staticmethod
    def _form_fields(options: ExtractionOptions) -> dict[str, str]:
        return {
            "strategy": options.strategy,
            "chunking_strategy": options.chunking_strategy,
            "languages": ",".join(options.languages),
            "ocr_languages": "+".join(options.languages),
            "ocr_enabled": str(options.ocr_enabled).lower(),
            "extract_tables": str(options.extract_tables).lower(),
            "include_page_breaks": "true",
        }

    async def is_available(self) -> bool:
        """Probe the health endpoint with a short timeout."""
        try:
            async with httpx.AsyncClient(
                timeout=self._health_timeout, transport=self._transport
            ) as client:
                response = await client.get(self.health_endpoint)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "structured_extraction.unavailable",
                endpoint=self.health_endpoint,
                error=str(exc),
            )
            return False
        return True

    async def check_health(self) -> dict[str, Any]:
        """Health probe with response time, for the readiness surfaces."""
        started = time.perf_counter()
        healthy = await self.is_available()
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        return {
            "status": "healthy" if healthy else "unhealthy",
            "endpoint": self.health_endpoint,
            "response_time_ms": elapsed_ms,
        }

    async def partition(
        self,
        filename: str,
        content: bytes,
        options: ExtractionOptions,
    ) -> list[StructuredElement]:
        """Send a file for partitioning.

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses.
            ValueError: If the response body is not an element list.
        """
        async with httpx.AsyncClient(
            timeout=self._request_timeout, transport=self._transport
        ) as client:
            response = await client.post(
                self._endpoint,
                headers=self._headers(),
                files={"files": (filename, content)},
                data=self._form_fields(options),
            )
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, list):
            raise ValueError("Structured extraction response is not a list of elements")

        return [
            StructuredElement(
                type=ElementType.from_label(item.get("type")),
                text=item.get("text") or "",
                metadata=item.get("metadata") or {},
                element_id=item.get("element_id"),
            )
            for item in payload
            if isinstance(item, dict)
        ]
