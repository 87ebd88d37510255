"""Playwright-backed client session for reactive web applications.

The session installs a small hook script before any page script runs. The
hook counts completed response cycles by listening to the client's
``shiny:busy`` / ``shiny:idle`` events, which lets the input applier wait
for the server to finish processing instead of merely sending a message.

Inputs are set through their input binding and then announced with a
``change`` event, so the binding sends the value under its own input type.
A value equal to the one the input already holds is not announced, because
the client would not resend it and no response cycle would follow.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from snapshot_app_tester.configuration.runtime_settings import BrowserSettings

from .client_contracts import ClientValues, DispatchOutcome

logger = logging.getLogger(__name__)

CLIENT_HOOK_SCRIPT = """
(() => {
  const state = { idleCount: 0, busy: false };
  window.__snapshotAppTester = state;
  const attach = () => {
    const $ = window.jQuery;
    if (!$ || state.attached) { return; }
    state.attached = true;
    $(document).on("shiny:busy", () => { state.busy = true; });
    $(document).on("shiny:idle", () => { state.busy = false; state.idleCount += 1; });
  };
  document.addEventListener("DOMContentLoaded", attach);
  window.addEventListener("load", attach);
})();
"""

_CONNECTED_SCRIPT = """
() => {
  const hook = window.__snapshotAppTester;
  const app = window.Shiny && window.Shiny.shinyapp;
  return Boolean(hook && app && app.isConnected() && hook.idleCount > 0 && !hook.busy);
}
"""

_CYCLE_COUNT_SCRIPT = """
() => (window.__snapshotAppTester ? window.__snapshotAppTester.idleCount : 0)
"""

_CYCLE_DONE_SCRIPT = """
(after) => {
  const hook = window.__snapshotAppTester;
  return Boolean(hook && hook.idleCount > after && !hook.busy);
}
"""

_DISPATCH_SCRIPT = """
(assignments) => {
  const $ = window.jQuery;
  const unbound = [];
  const unchanged = [];
  for (const [name, value] of Object.entries(assignments)) {
    const el = document.getElementById(name);
    const binding = el && $ ? $(el).data("shiny-input-binding") : null;
    if (!binding) {
      unbound.push(name);
      continue;
    }
    if (value === "click" && el.classList.contains("action-button")) {
      el.click();
      continue;
    }
    const previous = JSON.stringify(binding.getValue(el));
    binding.setValue(el, value);
    if (JSON.stringify(binding.getValue(el)) === previous) {
      unchanged.push(name);
      continue;
    }
    $(el).trigger("change");
  }
  return { unbound: unbound, unchanged: unchanged };
}
"""

_READ_VALUES_SCRIPT = """
() => {
  const app = window.Shiny && window.Shiny.shinyapp;
  if (!app) {
    return { input: {}, output: {} };
  }
  const input = {};
  for (const [key, value] of Object.entries(app.$inputValues || {})) {
    input[key.split(":")[0]] = value;
  }
  return { input: input, output: Object.assign({}, app.$values || {}) };
}
"""

_IS_FILE_INPUT_SCRIPT = """
(name) => {
  const el = document.getElementById(name);
  return Boolean(el && el.tagName === "INPUT" && el.type === "file");
}
"""


class ClientSessionError(Exception):
    """Raised when the browser session cannot load or talk to the application."""


class PlaywrightClientSession:
    """Client session driving one Playwright page."""

    def __init__(self, page: Page, *, closer: Callable[[], None] | None = None) -> None:
        self._page = page
        self._closer = closer

    @classmethod
    def launch(cls, settings: BrowserSettings) -> PlaywrightClientSession:
        """Start Playwright, open a browser page and install the cycle hook."""
        playwright = sync_playwright().start()
        try:
            browser_type = getattr(playwright, settings.name)
            browser = browser_type.launch(headless=settings.headless)
            page = browser.new_page(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height}
            )
            page.add_init_script(script=CLIENT_HOOK_SCRIPT)
        except PlaywrightError as exc:
            playwright.stop()
            raise ClientSessionError(f"Failed to launch {settings.name}: {exc}") from exc

        def _close() -> None:
            browser.close()
            playwright.stop()

        logger.debug("Launched %s (headless=%s)", settings.name, settings.headless)
        return cls(page, closer=_close)

    def navigate(self, url: str, *, timeout_seconds: float) -> None:
        timeout_ms = timeout_seconds * 1000
        try:
            self._page.goto(url, timeout=timeout_ms)
            self._page.wait_for_function(_CONNECTED_SCRIPT, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ClientSessionError(
                f"Application at {url} did not become idle within {timeout_seconds}s"
            ) from exc
        except PlaywrightError as exc:
            raise ClientSessionError(f"Failed to load {url}: {exc}") from exc

    def response_cycle_count(self) -> int:
        return int(self._page.evaluate(_CYCLE_COUNT_SCRIPT))

    def dispatch_inputs(self, assignments: Mapping[str, Any]) -> DispatchOutcome:
        raw = self._page.evaluate(_DISPATCH_SCRIPT, dict(assignments)) or {}
        return DispatchOutcome(
            unbound=tuple(raw.get("unbound") or ()),
            unchanged=tuple(raw.get("unchanged") or ()),
        )

    def upload_file(self, name: str, path: Path) -> bool:
        if not self._page.evaluate(_IS_FILE_INPUT_SCRIPT, name):
            return False
        self._page.set_input_files(_id_selector(name), str(path))
        return True

    def wait_for_response_cycle(self, after_cycle: int, *, timeout_seconds: float) -> bool:
        try:
            self._page.wait_for_function(
                _CYCLE_DONE_SCRIPT, arg=after_cycle, timeout=timeout_seconds * 1000
            )
        except PlaywrightTimeoutError:
            return False
        return True

    def read_client_values(self) -> ClientValues:
        raw = self._page.evaluate(_READ_VALUES_SCRIPT) or {}
        return ClientValues(
            input=dict(raw.get("input") or {}),
            output=dict(raw.get("output") or {}),
        )

    def capture_screenshot(self, path: Path) -> None:
        self._page.screenshot(path=str(path), type="png", full_page=True)

    def close(self) -> None:
        if self._closer is not None:
            closer, self._closer = self._closer, None
            closer()


def _id_selector(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'[id="{escaped}"]'
