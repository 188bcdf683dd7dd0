"""Playwright (sync API) implementation of the browser driver protocol.

Find-criteria map onto Playwright selectors:

| Criterion         | Playwright selector     |
| ----------------- | ----------------------- |
| id                | `[id="..."]`            |
| css               | the CSS as-is           |
| xpath             | `xpath=...`             |
| name              | `[name="..."]`          |
| class_name        | `.cls`                  |
| tag_name          | `tag`                   |
| link_text         | `a:text-is("...")`      |
| partial_link_text | `a:has-text("...")`     |
"""

from __future__ import annotations

import base64
import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from playwright.sync_api import ElementHandle, Page, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from ..config.settings import settings
from ..core.errors import ScriptExecutionFault, StaleReferenceFault
from ..core.ir.model import By, How

_STALE_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "execution context was destroyed",
    "target closed",
    "frame was detached",
)

DOCUMENT_READY_JS = "() => document.readyState === 'complete'"
IS_CONNECTED_JS = "el => el.isConnected"


def _quote(value: str) -> str:
    return json.dumps(value)


_SELECTORS = {
    How.ID: lambda v: f"[id={_quote(v)}]",
    How.CSS: lambda v: v,
    How.XPATH: lambda v: f"xpath={v}",
    How.NAME: lambda v: f"[name={_quote(v)}]",
    How.CLASS_NAME: lambda v: f".{v}",
    How.TAG_NAME: lambda v: v,
    How.LINK_TEXT: lambda v: f"a:text-is({_quote(v)})",
    How.PARTIAL_LINK_TEXT: lambda v: f"a:has-text({_quote(v)})",
}


def to_selector(criterion: By) -> str:
    return _SELECTORS[criterion.how](criterion.value)


def is_stale_error(error: BaseException) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _STALE_MARKERS)


class PlaywrightDriver:
    """Browser driver over a Playwright ``Page``, using ``ElementHandle`` handles."""

    def __init__(self, page: Page) -> None:
        self.page = page

    def find_all(self, criterion: By, root: ElementHandle | None = None) -> list[ElementHandle]:
        scope = root if root is not None else self.page
        return self._act(scope.query_selector_all, to_selector(criterion))

    def is_displayed(self, handle: ElementHandle) -> bool:
        if not self._act(handle.evaluate, IS_CONNECTED_JS):
            raise StaleReferenceFault("Element is not attached to the DOM")
        return self._act(handle.is_visible)

    def execute_script(self, script: str, arg: Any = None) -> Any:
        try:
            return self.page.evaluate(script, arg)
        except PlaywrightError as e:
            if is_stale_error(e):
                raise StaleReferenceFault(str(e)) from e
            raise ScriptExecutionFault(str(e)) from e

    def document_ready(self) -> bool:
        try:
            return bool(self.page.evaluate(DOCUMENT_READY_JS))
        except PlaywrightError as e:
            # A navigation in flight destroys the execution context.
            if is_stale_error(e):
                return False
            raise ScriptExecutionFault(str(e)) from e

    def _act(self, fn: Any, *args: Any) -> Any:
        try:
            return fn(*args)
        except PlaywrightError as e:
            if is_stale_error(e):
                raise StaleReferenceFault(str(e)) from e
            raise

    def click(self, handle: ElementHandle) -> None:
        self._act(handle.click)

    def clear(self, handle: ElementHandle) -> None:
        self._act(handle.fill, "")

    def send_keys(self, handle: ElementHandle, text: str) -> None:
        self._act(handle.type, text)

    def text(self, handle: ElementHandle) -> str:
        return self._act(handle.inner_text)

    def attribute(self, handle: ElementHandle, name: str) -> str | None:
        if name == "value":
            return self._act(handle.input_value)
        return self._act(handle.get_attribute, name)

    def tag_name(self, handle: ElementHandle) -> str:
        return self._act(handle.evaluate, "el => el.tagName.toLowerCase()")

    def is_enabled(self, handle: ElementHandle) -> bool:
        return self._act(handle.is_enabled)

    def is_selected(self, handle: ElementHandle) -> bool:
        return bool(self._act(handle.evaluate, "el => !!(el.checked || el.selected)"))

    def title(self) -> str:
        return self.page.title()

    def url(self) -> str:
        return self.page.url

    def page_source(self) -> str:
        return self.page.content()

    def navigate(self, url: str) -> None:
        self.page.goto(url)

    def screenshot_base64(self) -> str:
        return base64.b64encode(self.page.screenshot(type="png")).decode("utf-8")


@contextmanager
def open_page(
    headless: bool | None = None,
    browser: str | None = None,
    timeout_ms: int = 30000,
) -> Iterator[PlaywrightDriver]:
    """Launch a local browser and yield a driver for a fresh page."""
    headless = settings.headless if headless is None else headless
    browser_name = browser or settings.browser
    with sync_playwright() as p:
        instance = getattr(p, browser_name).launch(headless=headless)
        try:
            context = instance.new_context()
            page = context.new_page()
            page.set_default_timeout(timeout_ms)
            yield PlaywrightDriver(page)
        finally:
            instance.close()
