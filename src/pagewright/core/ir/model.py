"""Page binding IR: find-criteria, locator specs and per-field binding specs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union


class How(str, Enum):
    ID = "id"
    CSS = "css"
    XPATH = "xpath"
    NAME = "name"
    CLASS_NAME = "class_name"
    TAG_NAME = "tag_name"
    LINK_TEXT = "link_text"
    PARTIAL_LINK_TEXT = "partial_link_text"


@dataclass(frozen=True)
class By:
    """A single primitive find-criterion."""

    how: How
    value: str

    def __str__(self) -> str:
        return f"By.{self.how.value}: {self.value}"


class Composition(str, Enum):
    SIMPLE = "simple"
    CHAIN = "chain"  # each item narrows within the previous matches
    ALTERNATION = "alternation"  # first item with >= 1 match wins


LocatorItem = Union[By, "LocatorSpec"]


@dataclass(frozen=True)
class LocatorSpec:
    mode: Composition
    items: tuple[LocatorItem, ...]

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("LocatorSpec needs at least one criterion")
        if self.mode is Composition.SIMPLE and len(self.items) != 1:
            raise ValueError("SIMPLE locator takes exactly one criterion")

    @classmethod
    def simple(cls, criterion: By) -> LocatorSpec:
        return cls(Composition.SIMPLE, (criterion,))

    @classmethod
    def chain(cls, *items: LocatorItem) -> LocatorSpec:
        return cls(Composition.CHAIN, tuple(items))

    @classmethod
    def alternation(cls, *items: LocatorItem) -> LocatorSpec:
        return cls(Composition.ALTERNATION, tuple(items))

    def __str__(self) -> str:
        if self.mode is Composition.SIMPLE:
            return str(self.items[0])
        joiner = " > " if self.mode is Composition.CHAIN else " | "
        return "(" + joiner.join(str(i) for i in self.items) + ")"


class ReadinessMark(str, Enum):
    VISIBLE = "visible"
    INVISIBLE = "invisible"
    FORCE_VISIBLE = "force_visible"


VISIBLE = ReadinessMark.VISIBLE
INVISIBLE = ReadinessMark.INVISIBLE
FORCE_VISIBLE = ReadinessMark.FORCE_VISIBLE


class FieldCategory(str, Enum):
    TYPIFIED_ELEMENT = "typified_element"
    COMPOSITE_BLOCK = "composite_block"
    SINGLE_ELEMENT = "single_element"
    TYPIFIED_ELEMENT_LIST = "typified_element_list"
    COMPOSITE_BLOCK_LIST = "composite_block_list"
    ELEMENT_LIST = "element_list"
    UNRECOGNIZED = "unrecognized"

    @property
    def is_list(self) -> bool:
        return self in (
            FieldCategory.ELEMENT_LIST,
            FieldCategory.TYPIFIED_ELEMENT_LIST,
            FieldCategory.COMPOSITE_BLOCK_LIST,
        )


@dataclass(frozen=True)
class FieldDeclaration:
    """Class-level marker describing how a page field is found and awaited."""

    locator: LocatorSpec | None = None
    mark: ReadinessMark | None = None
    timeout: float | None = None
    name: str | None = None


@dataclass(frozen=True)
class FieldBindingSpec:
    field_name: str
    category: FieldCategory
    locator: LocatorSpec | None
    display_name: str
    mark: ReadinessMark | None = None
    timeout_override: float | None = None
    element_type: type | None = None

    @property
    def bindable(self) -> bool:
        return self.category is not FieldCategory.UNRECOGNIZED


@dataclass(frozen=True)
class WaitPolicy:
    timeout: float = 10.0
    poll_interval: float = 0.5

    def with_timeout(self, timeout: float | None) -> WaitPolicy:
        if timeout is None:
            return self
        return replace(self, timeout=timeout)


_CRITERIA_KEYWORDS = {
    "id": How.ID,
    "css": How.CSS,
    "xpath": How.XPATH,
    "name": How.NAME,
    "class_name": How.CLASS_NAME,
    "tag_name": How.TAG_NAME,
    "link_text": How.LINK_TEXT,
    "partial_link_text": How.PARTIAL_LINK_TEXT,
}


def by(**criterion: str) -> By:
    """Build one criterion, e.g. ``by(css="#start button")``."""
    if len(criterion) != 1:
        raise ValueError(f"Expected exactly one criterion, got {sorted(criterion)}")
    key, value = next(iter(criterion.items()))
    if key not in _CRITERIA_KEYWORDS:
        raise ValueError(f"Unknown criterion: {key}")
    return By(_CRITERIA_KEYWORDS[key], value)


def find_by(
    *,
    chain: list[LocatorItem] | None = None,
    any_of: list[LocatorItem] | None = None,
    mark: ReadinessMark | None = None,
    timeout: float | None = None,
    label: str | None = None,
    **criterion: str,
) -> FieldDeclaration:
    """Declare an element field on a page object or block.

    Exactly one of a keyword criterion (``css=``, ``xpath=``, ``id=``, ...),
    ``chain=`` or ``any_of=`` may be given. Leaving all of them out is
    allowed for composite blocks whose class carries a ``__locator__``.

    Args:
        chain: Criteria applied one inside the other.
        any_of: Alternatives; the first with a match wins.
        mark: Readiness condition checked when the page is loaded.
        timeout: Per-field wait timeout in seconds.
        label: Human readable name used in logs and errors.
    """
    given = sum(1 for g in (chain, any_of, criterion or None) if g)
    if given > 1:
        raise ValueError("Use only one of a criterion, chain= or any_of=")

    locator: LocatorSpec | None = None
    if criterion:
        locator = LocatorSpec.simple(by(**criterion))
    elif chain:
        locator = LocatorSpec.chain(*chain)
    elif any_of:
        locator = LocatorSpec.alternation(*any_of)

    return FieldDeclaration(locator=locator, mark=mark, timeout=timeout, name=label)
