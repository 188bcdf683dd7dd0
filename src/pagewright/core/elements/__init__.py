"""Element types that page objects declare their fields with."""

from .block import HtmlElement
from .element import Element, ElementProxy, ResolvedElement
from .typified import Button, CheckBox, Link, TextBlock, TextInput, TypifiedElement

__all__ = [
    "Button",
    "CheckBox",
    "Element",
    "ElementProxy",
    "HtmlElement",
    "Link",
    "ResolvedElement",
    "TextBlock",
    "TextInput",
    "TypifiedElement",
]
