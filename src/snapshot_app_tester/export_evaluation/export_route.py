"""ASGI wrapper serving the export registry next to the application."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from snapshot_app_tester.configuration.runtime_settings import DEFAULT_EXPORT_PATH

from .export_registry import ExportRegistry, default_registry
from .runtime_flags import is_test_mode

logger = logging.getLogger(__name__)

Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]


class ExportRouteApp:
    """Answer ``GET /<export_path>`` with the evaluated exports.

    Every other request is passed to the wrapped application unchanged.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        registry: ExportRegistry | None = None,
        export_path: str = DEFAULT_EXPORT_PATH,
    ) -> None:
        self._app = app
        self._registry = default_registry if registry is None else registry
        self._path = "/" + export_path.strip("/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path") != self._path:
            await self._app(scope, receive, send)
            return
        if scope.get("method", "GET") != "GET":
            await _respond(send, 405, b"Method Not Allowed", "text/plain; charset=utf-8")
            return
        body = self._registry.render_payload().encode("utf-8")
        await _respond(send, 200, body, "application/json")


def with_export_route(
    app: ASGIApp,
    *,
    registry: ExportRegistry | None = None,
    export_path: str = DEFAULT_EXPORT_PATH,
    enabled: bool | None = None,
) -> ASGIApp:
    """Expose exports for the snapshot driver, only in test mode by default.

    Example::

        app = with_export_route(App(app_ui, server))
    """
    active = is_test_mode() if enabled is None else enabled
    if not active:
        return app
    logger.debug("Serving exports at /%s", export_path.strip("/"))
    return ExportRouteApp(app, registry=registry, export_path=export_path)


async def _respond(send: Send, status: int, body: bytes, content_type: str) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [
                (b"content-type", content_type.encode("latin-1")),
                (b"content-length", str(len(body)).encode("latin-1")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})
