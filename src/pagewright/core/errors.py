"""Exceptions raised while binding, resolving and awaiting page elements."""

from __future__ import annotations

from typing import Any


class PagewrightError(Exception):
    """Base class for all page binding errors."""


class ElementNotFound(PagewrightError):
    """A single-element proxy resolved to zero matches."""

    def __init__(self, name: str, locator: Any = None) -> None:
        """Initialize the error.

        Args:
            name (str):
                Display name of the field that could not be resolved.
            locator (Any, optional):
                The locator spec that produced no matches.

        """
        self.name = name
        self.locator = locator
        message = f"Unable to locate element '{name}'"
        if locator is not None:
            message += f" using {locator}"
        super().__init__(message)


class StaleReferenceFault(PagewrightError):
    """A previously resolved handle was detached from the document."""


class ScriptExecutionFault(PagewrightError):
    """A script could not be executed in the page."""


class WaitTimeoutError(PagewrightError):
    """A readiness condition was not met in time."""

    def __init__(
        self,
        field_name: str,
        condition: str,
        elapsed: float,
        cause: BaseException | None = None,
    ) -> None:
        self.field_name = field_name
        self.condition = condition
        self.elapsed = elapsed
        self.cause = cause
        message = (
            f"Timed out after {elapsed:.1f}s waiting for '{field_name}' to be {condition}"
        )
        if cause is not None:
            message += f" ({type(cause).__name__}: {cause})"
        super().__init__(message)


class PageLifecycleError(PagewrightError):
    """A page object was used outside of its lifecycle."""
