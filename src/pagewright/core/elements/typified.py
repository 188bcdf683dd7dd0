"""Typed elements: a wrapped element plus a value/interaction overlay."""

from __future__ import annotations

from typing import Any

from ..errors import ElementNotFound
from .element import Element


class TypifiedElement(Element):
    """Base for typed elements. Raw actions go to ``wrapped_element``."""

    def __init__(self, wrapped_element: Element, name: str | None = None) -> None:
        super().__init__(wrapped_element.context, name or wrapped_element.name)
        self.wrapped_element = wrapped_element

    def _resolve(self) -> Any:
        return self.wrapped_element.handle

    def exists(self) -> bool:
        try:
            self._resolve()
        except ElementNotFound:
            return False
        return True


class Button(TypifiedElement):
    pass


class Link(TypifiedElement):
    def get_reference(self) -> str | None:
        return self.get_attribute("href")


class TextBlock(TypifiedElement):
    def get_text(self) -> str:
        return super().get_text().strip()


class TextInput(TypifiedElement):
    """Text field; its text is the current ``value``, not the inner text."""

    def get_text(self) -> str:
        if self.get_tag_name() == "textarea":
            return super().get_text()
        return self.get_attribute("value") or ""

    def set_text(self, text: str) -> None:
        self.clear()
        self.send_keys(text)


class CheckBox(TypifiedElement):
    def select(self) -> None:
        if not self.is_selected():
            self.click()

    def deselect(self) -> None:
        if self.is_selected():
            self.click()

    def set(self, value: bool) -> None:
        if value:
            self.select()
        else:
            self.deselect()
