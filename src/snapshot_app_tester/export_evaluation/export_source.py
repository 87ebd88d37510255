"""Driver-side retrieval of evaluated exports over HTTP."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from .export_registry import ExportEvaluation

logger = logging.getLogger(__name__)


class ExportSource(Protocol):  # pylint: disable=too-few-public-methods
    """Anything that can hand the driver the current export values."""

    def fetch(self) -> dict[str, Any]: ...


class ExportSourceError(Exception):
    """Raised when the export endpoint cannot be reached or parsed."""


class HttpExportSource:
    """Fetch evaluated exports from the application's export route.

    A 404 means the application registered no export route; that is treated
    as an application without exports.
    """

    def __init__(
        self,
        *,
        base_url: str,
        export_path: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/{export_path.strip('/')}"
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    @property
    def url(self) -> str:
        return self._url

    def fetch(self) -> dict[str, Any]:
        try:
            response = self._client.get(self._url)
        except httpx.HTTPError as exc:
            raise ExportSourceError(f"Export endpoint unreachable: {self._url}: {exc}") from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            logger.debug("No export route at %s; assuming no exports", self._url)
            return {}
        try:
            response.raise_for_status()
            evaluation = ExportEvaluation.from_payload(response.json())
        except (httpx.HTTPStatusError, ValueError) as exc:
            raise ExportSourceError(f"Invalid export response from {self._url}: {exc}") from exc
        return evaluation.values_or_raise()

    def close(self) -> None:
        self._client.close()
