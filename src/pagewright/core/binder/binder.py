"""Binds declared element fields of page objects and blocks to lazy proxies."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from ..ir.model import FieldBindingSpec
from ..proxy.factory import ElementProxyFactory
from .classify import build_schema

if TYPE_CHECKING:
    from ..elements.block import HtmlElement
    from ..elements.element import Element
    from ..locator.resolver import SearchContext

logger = logging.getLogger(__name__)

BINDINGS_ATTR = "_pagewright_bindings"


def bindings_of(obj: Any) -> tuple[FieldBindingSpec, ...]:
    """Specs of the fields bound on ``obj``, in declaration order."""
    return obj.__dict__.get(BINDINGS_ATTR, ())


class ElementBinder:
    """Turns a class's declared fields into proxies on an instance.

    The schema of each class is computed once and cached. Binding itself never
    resolves an element.
    """

    def __init__(self, factory: ElementProxyFactory | None = None) -> None:
        self.factory = factory or ElementProxyFactory()
        self._schemas: dict[type, tuple[FieldBindingSpec, ...]] = {}
        self._lock = threading.Lock()

    def schema_for(self, cls: type) -> tuple[FieldBindingSpec, ...]:
        with self._lock:
            schema = self._schemas.get(cls)
            if schema is None:
                schema = build_schema(cls)
                self._schemas[cls] = schema
        return schema

    def bind(self, obj: Any, context: SearchContext) -> tuple[FieldBindingSpec, ...]:
        bound: list[FieldBindingSpec] = []
        for spec in self.schema_for(type(obj)):
            if not spec.bindable:
                logger.debug(
                    "Skipping field %s.%s: not an element field",
                    type(obj).__name__,
                    spec.field_name,
                )
                continue
            proxy = self.factory.create(
                spec.category,
                spec.locator,  # type: ignore[arg-type]
                context,
                spec.display_name,
                element_type=spec.element_type,
                binder=self,
            )
            object.__setattr__(obj, spec.field_name, proxy)
            bound.append(spec)

        result = tuple(bound)
        obj.__dict__[BINDINGS_ATTR] = result
        logger.debug("Bound %d element field(s) on %s", len(result), type(obj).__name__)
        return result

    def bind_block(
        self,
        block_type: type[HtmlElement],
        root: Element,
        context: SearchContext,
        name: str,
    ) -> HtmlElement:
        block = block_type()
        block._attach(root, name)
        self.bind(block, context)
        return block
