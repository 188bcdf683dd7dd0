"""Locator resolution against a search context.

The driver protocol here is the only surface the core needs from a browser
automation library; ``pagewright.adapters.playwright`` implements it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ..errors import ElementNotFound
from ..ir.model import By, Composition, LocatorSpec


@runtime_checkable
class BrowserDriver(Protocol):
    """Capabilities the binding engine uses from a browser session."""

    def find_all(self, criterion: By, root: Any | None = None) -> list[Any]: ...

    def is_displayed(self, handle: Any) -> bool: ...

    def execute_script(self, script: str, arg: Any = None) -> Any: ...

    def document_ready(self) -> bool: ...

    def click(self, handle: Any) -> None: ...

    def clear(self, handle: Any) -> None: ...

    def send_keys(self, handle: Any, text: str) -> None: ...

    def text(self, handle: Any) -> str: ...

    def attribute(self, handle: Any, name: str) -> str | None: ...

    def tag_name(self, handle: Any) -> str: ...

    def is_enabled(self, handle: Any) -> bool: ...

    def is_selected(self, handle: Any) -> bool: ...

    def title(self) -> str: ...

    def url(self) -> str: ...

    def page_source(self) -> str: ...

    def navigate(self, url: str) -> None: ...

    def screenshot_base64(self) -> str: ...


@dataclass(frozen=True)
class SearchContext:
    """The document (``root is None``) or an element to search within.

    An anchored context has no fixed root: its ``anchor`` locator is resolved
    again for every search, so a root that was re-rendered is picked up.
    """

    driver: BrowserDriver
    root: Any | None = None
    anchor: Locator | None = None
    anchor_name: str = "root"

    def find_all(self, criterion: By) -> list[Any]:
        return list(self.driver.find_all(criterion, self.current_root()))

    def current_root(self) -> Any | None:
        if self.anchor is not None:
            return self.anchor.find_first(self.anchor_name)
        return self.root

    def within(self, handle: Any) -> SearchContext:
        return SearchContext(self.driver, handle)

    def anchored(self, locator: Locator, name: str) -> SearchContext:
        return SearchContext(self.driver, anchor=locator, anchor_name=name)

    def is_displayed(self, handle: Any) -> bool:
        return self.driver.is_displayed(handle)

    def execute_script(self, script: str, arg: Any = None) -> Any:
        return self.driver.execute_script(script, arg)

    def document_ready(self) -> bool:
        return self.driver.document_ready()


class LocatorResolver:
    """Evaluates locator specs against the current DOM. Never waits or caches."""

    def resolve(self, spec: LocatorSpec | By, context: SearchContext) -> list[Any]:
        if isinstance(spec, By):
            return context.find_all(spec)

        if spec.mode is Composition.SIMPLE:
            return self.resolve(spec.items[0], context)

        if spec.mode is Composition.CHAIN:
            matches = self.resolve(spec.items[0], context)
            for item in spec.items[1:]:
                narrowed: list[Any] = []
                for handle in matches:
                    narrowed.extend(self.resolve(item, context.within(handle)))
                matches = narrowed
                if not matches:
                    break
            return matches

        for item in spec.items:
            matches = self.resolve(item, context)
            if matches:
                return matches
        return []

    def locator(self, spec: LocatorSpec, context: SearchContext) -> Locator:
        return Locator(spec, context, self)


class Locator:
    """Lazy finder for one field: holds the spec and context, resolves on demand."""

    def __init__(
        self, spec: LocatorSpec, context: SearchContext, resolver: LocatorResolver
    ) -> None:
        self.spec = spec
        self.context = context
        self._resolver = resolver

    def find_all(self) -> list[Any]:
        return self._resolver.resolve(self.spec, self.context)

    def find_first(self, name: str) -> Any:
        matches = self.find_all()
        if not matches:
            raise ElementNotFound(name, self.spec)
        return matches[0]

    def __repr__(self) -> str:
        return f"Locator({self.spec})"
