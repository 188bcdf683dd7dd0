from __future__ import annotations

import os
import sys
from collections import deque
from pathlib import Path
from typing import Any

import pytest


def pytest_sessionstart(session):
    # Ensure src/ is importable when running pytest without installation
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))
    os.environ.setdefault("HEADLESS", "true")


class FakeNode:
    """One element of the in-memory DOM."""

    def __init__(
        self,
        criteria: set,
        parent: FakeNode | None = None,
        displayed: bool = True,
        text: str = "",
        tag: str = "div",
        attributes: dict[str, str] | None = None,
        checkable: bool = False,
    ) -> None:
        self.criteria = criteria
        self.parent = parent
        self.displayed = displayed
        self.text = text
        self.tag = tag
        self.attributes = attributes or {}
        self.checkable = checkable
        self.selected = False
        self.enabled = True
        self.attached = True
        self.clicks = 0
        self.styles: dict[str, str] = {}
        self.stale_checks = 0  # next N visibility checks fail as detached

    def is_inside(self, root: FakeNode) -> bool:
        node = self.parent
        while node is not None:
            if node is root:
                return True
            node = node.parent
        return False

    def __repr__(self) -> str:
        return f"FakeNode({self.tag}, {self.text!r})"


class FakeDriver:
    """In-memory implementation of the browser driver protocol."""

    def __init__(self) -> None:
        self.nodes: list[FakeNode] = []
        self.find_calls: list[tuple[Any, Any]] = []
        self.scripts: list[tuple[str, Any]] = []
        self.script_results: dict[str, Any] = {}
        self.script_error: Exception | None = None
        self.ready_reports: deque[bool] = deque()
        self.ready_polls = 0
        self.navigations: list[str] = []
        self.current_url = "about:blank"

    # --- DOM building ---

    def add(self, *criteria, parent: FakeNode | None = None, **kwargs: Any) -> FakeNode:
        node = FakeNode(set(criteria), parent=parent, **kwargs)
        self.nodes.append(node)
        return node

    def remove(self, node: FakeNode) -> None:
        node.attached = False
        self.nodes.remove(node)

    # --- driver protocol ---

    def find_all(self, criterion, root=None):
        from pagewright.core.errors import StaleReferenceFault

        self.find_calls.append((criterion, root))
        if root is not None and not root.attached:
            raise StaleReferenceFault("root is detached")
        return [
            n
            for n in self.nodes
            if criterion in n.criteria and (root is None or n.is_inside(root))
        ]

    def _check(self, handle: FakeNode) -> None:
        from pagewright.core.errors import StaleReferenceFault

        if not handle.attached:
            raise StaleReferenceFault(f"{handle} is detached")

    def is_displayed(self, handle: FakeNode) -> bool:
        from pagewright.core.errors import StaleReferenceFault

        if handle.stale_checks > 0:
            handle.stale_checks -= 1
            raise StaleReferenceFault(f"{handle} went stale")
        self._check(handle)
        return handle.displayed

    def execute_script(self, script: str, arg: Any = None) -> Any:
        self.scripts.append((script, arg))
        if self.script_error is not None:
            raise self.script_error
        if "zIndex" in script and isinstance(arg, FakeNode):
            arg.styles.update({"zIndex": "10000", "visibility": "visible", "opacity": "1"})
        result = self.script_results.get(script)
        return result() if callable(result) else result

    def document_ready(self) -> bool:
        self.ready_polls += 1
        if self.ready_reports:
            return self.ready_reports.popleft()
        return True

    def click(self, handle: FakeNode) -> None:
        self._check(handle)
        handle.clicks += 1
        if handle.checkable:
            handle.selected = not handle.selected

    def clear(self, handle: FakeNode) -> None:
        self._check(handle)
        handle.attributes["value"] = ""

    def send_keys(self, handle: FakeNode, text: str) -> None:
        self._check(handle)
        handle.attributes["value"] = handle.attributes.get("value", "") + text

    def text(self, handle: FakeNode) -> str:
        self._check(handle)
        return handle.text

    def attribute(self, handle: FakeNode, name: str) -> str | None:
        self._check(handle)
        return handle.attributes.get(name)

    def tag_name(self, handle: FakeNode) -> str:
        return handle.tag

    def is_enabled(self, handle: FakeNode) -> bool:
        return handle.enabled

    def is_selected(self, handle: FakeNode) -> bool:
        return handle.selected

    def title(self) -> str:
        return "Fake page"

    def url(self) -> str:
        return self.current_url

    def page_source(self) -> str:
        return "<html></html>"

    def navigate(self, url: str) -> None:
        self.navigations.append(url)
        self.current_url = url

    def screenshot_base64(self) -> str:
        return "iVBORw0KGgo="


class FakeClock:
    """Deterministic clock; ``sleep`` advances time and fires scheduled DOM changes."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []
        self._scheduled: list[tuple[float, Any]] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        due = [item for item in self._scheduled if item[0] <= self.now]
        self._scheduled = [item for item in self._scheduled if item[0] > self.now]
        for _, action in due:
            action()

    def at(self, when: float, action) -> None:
        self._scheduled.append((when, action))


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
