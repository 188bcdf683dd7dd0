"""Deferred-resolution proxies for every bindable field shape.

Nothing here touches the driver at construction time. Each capability call
(an action on a single element, ``len()``/index/iteration on a list, any
attribute of a block) re-resolves the locator against the current DOM.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, overload

from ..elements.element import Element, ElementProxy, ResolvedElement
from ..ir.model import FieldCategory, LocatorSpec
from ..locator.resolver import Locator, LocatorResolver, SearchContext

if TYPE_CHECKING:
    from ..binder.binder import ElementBinder
    from ..elements.block import HtmlElement


class ElementListProxy(Sequence):
    """Live list of matches. The count may change between calls."""

    def __init__(
        self,
        locator: Locator,
        name: str,
        wrap: Callable[[Any, int], Any],
        lazy_first: Callable[[], Any],
    ) -> None:
        self.locator = locator
        self.name = name
        self._wrap = wrap
        self._lazy_first = lazy_first

    def resolve(self) -> list[Any]:
        return [self._wrap(h, i) for i, h in enumerate(self.locator.find_all())]

    def first_lazy(self) -> Any:
        """A lazy single-shape proxy for the first match of this list."""
        return self._lazy_first()

    def __len__(self) -> int:
        return len(self.locator.find_all())

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index):
        return self.resolve()[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.resolve())

    def __repr__(self) -> str:
        return f"ElementListProxy({self.name!r}, {self.locator.spec})"


class BlockProxy:
    """Lazy composite block.

    Every attribute access resolves the root element and binds a fresh block
    instance against it, so block fields always search inside the current root.
    """

    def __init__(
        self,
        block_type: type[HtmlElement],
        locator: Locator,
        name: str,
        binder: ElementBinder,
    ) -> None:
        object.__setattr__(self, "_proxy_block_type", block_type)
        object.__setattr__(self, "_proxy_locator", locator)
        object.__setattr__(self, "_proxy_name", name)
        object.__setattr__(self, "_proxy_binder", binder)
        object.__setattr__(
            self, "_proxy_root", ElementProxy(locator, name)
        )

    @property
    def wrapped_element(self) -> ElementProxy:
        return self._proxy_root

    @property
    def block_type(self) -> type[HtmlElement]:
        return self._proxy_block_type

    def resolve_block(self) -> HtmlElement:
        handle = self._proxy_locator.find_first(self._proxy_name)
        root = ResolvedElement(handle, self._proxy_locator.context, self._proxy_name)
        return self._proxy_binder.bind_block(
            self._proxy_block_type,
            root,
            self._proxy_locator.context.within(handle),
            self._proxy_name,
        )

    def anchored_block(self) -> HtmlElement:
        """A block whose root is found again for every sub-field lookup."""
        locator = self._proxy_locator
        return self._proxy_binder.bind_block(
            self._proxy_block_type,
            self._proxy_root,
            locator.context.anchored(locator, self._proxy_name),
            self._proxy_name,
        )

    def __getattr__(self, item: str) -> Any:
        if item.startswith("_proxy_"):
            raise AttributeError(item)
        return getattr(self.resolve_block(), item)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"Block proxy '{self._proxy_name}' is read-only")

    def __repr__(self) -> str:
        return f"BlockProxy({self._proxy_block_type.__name__}, {self._proxy_name!r})"


class ElementProxyFactory:
    """Creates the proxy matching a field's shape."""

    def __init__(self, resolver: LocatorResolver | None = None) -> None:
        self.resolver = resolver or LocatorResolver()

    def create(  # noqa: PLR0911
        self,
        shape: FieldCategory,
        locator_spec: LocatorSpec,
        context: SearchContext,
        name: str,
        element_type: type | None = None,
        binder: ElementBinder | None = None,
    ) -> Any:
        locator = self.resolver.locator(locator_spec, context)

        if shape is FieldCategory.SINGLE_ELEMENT:
            return ElementProxy(locator, name)

        if shape is FieldCategory.TYPIFIED_ELEMENT:
            return element_type(ElementProxy(locator, name), name)  # type: ignore[misc]

        if shape is FieldCategory.COMPOSITE_BLOCK:
            return BlockProxy(element_type, locator, name, _require(binder, name))  # type: ignore[arg-type]

        if shape is FieldCategory.ELEMENT_LIST:
            return ElementListProxy(
                locator,
                name,
                wrap=lambda h, i: ResolvedElement(h, context, f"{name}[{i}]"),
                lazy_first=lambda: ElementProxy(locator, f"{name}[0]"),
            )

        if shape is FieldCategory.TYPIFIED_ELEMENT_LIST:
            return ElementListProxy(
                locator,
                name,
                wrap=lambda h, i: element_type(ResolvedElement(h, context, f"{name}[{i}]")),  # type: ignore[misc]
                lazy_first=lambda: element_type(ElementProxy(locator, f"{name}[0]")),  # type: ignore[misc]
            )

        if shape is FieldCategory.COMPOSITE_BLOCK_LIST:
            block_binder = _require(binder, name)
            return ElementListProxy(
                locator,
                name,
                wrap=lambda h, i: block_binder.bind_block(
                    element_type,  # type: ignore[arg-type]
                    ResolvedElement(h, context, f"{name}[{i}]"),
                    context.within(h),
                    f"{name}[{i}]",
                ),
                lazy_first=lambda: BlockProxy(
                    element_type, locator, f"{name}[0]", block_binder  # type: ignore[arg-type]
                ),
            )

        raise ValueError(f"Field '{name}' has no element shape: {shape.value}")


def _require(binder: ElementBinder | None, name: str) -> ElementBinder:
    if binder is None:
        raise ValueError(f"Block field '{name}' needs a binder to bind its sub-fields")
    return binder


def unwrap(value: Any) -> Element:
    """The plain element behind a proxy, typed element or block."""
    if isinstance(value, BlockProxy):
        return value.wrapped_element
    wrapped = getattr(value, "wrapped_element", None)
    if isinstance(wrapped, Element):
        return wrapped
    return value
