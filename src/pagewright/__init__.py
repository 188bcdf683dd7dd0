"""Lazy page objects with readiness waits for browser tests."""

from .core.binder.binder import ElementBinder, bindings_of
from .core.elements import (
    Button,
    CheckBox,
    Element,
    HtmlElement,
    Link,
    TextBlock,
    TextInput,
    TypifiedElement,
)
from .core.errors import (
    ElementNotFound,
    PageLifecycleError,
    PagewrightError,
    ScriptExecutionFault,
    StaleReferenceFault,
    WaitTimeoutError,
)
from .core.ir.model import (
    FORCE_VISIBLE,
    INVISIBLE,
    VISIBLE,
    By,
    LocatorSpec,
    ReadinessMark,
    WaitPolicy,
    by,
    find_by,
)
from .core.lifecycle.page import BasePage, PageLifecycle, PageReadyObserver, PageState

__all__ = [
    "FORCE_VISIBLE",
    "INVISIBLE",
    "VISIBLE",
    "BasePage",
    "Button",
    "By",
    "CheckBox",
    "Element",
    "ElementBinder",
    "ElementNotFound",
    "HtmlElement",
    "Link",
    "LocatorSpec",
    "PageLifecycle",
    "PageLifecycleError",
    "PageReadyObserver",
    "PageState",
    "PagewrightError",
    "ReadinessMark",
    "ScriptExecutionFault",
    "StaleReferenceFault",
    "TextBlock",
    "TextInput",
    "TypifiedElement",
    "WaitPolicy",
    "WaitTimeoutError",
    "bindings_of",
    "by",
    "find_by",
]
