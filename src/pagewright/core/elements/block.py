"""Composite blocks: a group of element fields rooted at one element.

A block subclass declares fields exactly like a page object does. When a
block is resolved its fields are bound with the block's root element as the
search context. ``__locator__`` gives the root locator used when a field of
this block type does not declare its own criteria.
"""

from __future__ import annotations

from typing import Any, ClassVar

from ..errors import ElementNotFound
from ..ir.model import LocatorSpec
from .element import Element


class HtmlElement(Element):
    __locator__: ClassVar[LocatorSpec | None] = None

    wrapped_element: Element

    def __init__(self, wrapped_element: Element | None = None, name: str | None = None) -> None:
        super().__init__(
            wrapped_element.context if wrapped_element is not None else None,
            name or type(self).__name__,
        )
        if wrapped_element is not None:
            self.wrapped_element = wrapped_element

    def _attach(self, wrapped_element: Element, name: str) -> None:
        self.wrapped_element = wrapped_element
        self._context = wrapped_element.context
        self.name = name

    def _resolve(self) -> Any:
        wrapped = self.__dict__.get("wrapped_element")
        if wrapped is None:
            raise ElementNotFound(self.name)
        return wrapped.handle
