"""Element capability types.

``Element`` exposes the raw actions of one DOM element. Subclasses only
decide *how* the underlying handle is obtained: ``ElementProxy`` finds it
again on every call, ``ResolvedElement`` holds a handle that was already
found (list members, block roots).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..errors import ElementNotFound

if TYPE_CHECKING:
    from ..ir.model import By
    from ..locator.resolver import Locator, SearchContext


class Element(ABC):
    """One DOM element and the actions a test can take on it."""

    def __init__(self, context: SearchContext | None = None, name: str = "element") -> None:
        self._context = context
        self.name = name

    @abstractmethod
    def _resolve(self) -> Any:
        """Find the driver handle this element acts on."""

    @property
    def context(self) -> SearchContext:
        if self._context is None:
            raise ElementNotFound(self.name)
        return self._context

    @property
    def handle(self) -> Any:
        """The raw driver handle, resolved now."""
        return self._resolve()

    # --- raw actions ---

    def click(self) -> None:
        self.context.driver.click(self._resolve())

    def clear(self) -> None:
        self.context.driver.clear(self._resolve())

    def send_keys(self, text: str) -> None:
        self.context.driver.send_keys(self._resolve(), text)

    def get_text(self) -> str:
        return self.context.driver.text(self._resolve())

    def get_attribute(self, name: str) -> str | None:
        return self.context.driver.attribute(self._resolve(), name)

    def get_tag_name(self) -> str:
        return self.context.driver.tag_name(self._resolve())

    def is_displayed(self) -> bool:
        return self.context.driver.is_displayed(self._resolve())

    def is_enabled(self) -> bool:
        return self.context.driver.is_enabled(self._resolve())

    def is_selected(self) -> bool:
        return self.context.driver.is_selected(self._resolve())

    # --- scoped lookups ---

    def find_elements(self, criterion: By) -> list[Element]:
        scope = self.context.within(self._resolve())
        return [
            ResolvedElement(h, scope, f"{self.name} > {criterion}")
            for h in scope.find_all(criterion)
        ]

    def find_element(self, criterion: By) -> Element:
        found = self.find_elements(criterion)
        if not found:
            raise ElementNotFound(f"{self.name} > {criterion}")
        return found[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ElementProxy(Element):
    """Deferred element: every capability call resolves the locator again."""

    def __init__(self, locator: Locator, name: str) -> None:
        super().__init__(locator.context, name)
        self.locator = locator

    def _resolve(self) -> Any:
        return self.locator.find_first(self.name)


class ResolvedElement(Element):
    """Element bound to a handle that has already been located."""

    def __init__(self, handle: Any, context: SearchContext, name: str) -> None:
        super().__init__(context, name)
        self._handle = handle

    def _resolve(self) -> Any:
        return self._handle
