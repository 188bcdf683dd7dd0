"""Field classification and per-class binding schemas."""

from __future__ import annotations

import collections.abc
import inspect
import logging
import typing
from typing import Any

from ..elements.block import HtmlElement
from ..elements.element import Element
from ..elements.typified import TypifiedElement
from ..ir.model import FieldBindingSpec, FieldCategory, FieldDeclaration

logger = logging.getLogger(__name__)

# The block's own root must never be bound as one of its fields.
WRAPPED_ELEMENT_FIELD = "wrapped_element"

_LIST_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)

# Ordered: the first matching shape wins.
_SINGLE_SHAPES = (
    (TypifiedElement, FieldCategory.TYPIFIED_ELEMENT),
    (HtmlElement, FieldCategory.COMPOSITE_BLOCK),
    (Element, FieldCategory.SINGLE_ELEMENT),
)
_LIST_SHAPES = (
    (TypifiedElement, FieldCategory.TYPIFIED_ELEMENT_LIST),
    (HtmlElement, FieldCategory.COMPOSITE_BLOCK_LIST),
    (Element, FieldCategory.ELEMENT_LIST),
)


def classify_annotation(annotation: Any) -> tuple[FieldCategory, type | None]:
    """Map a field annotation onto exactly one field category.

    Returns the category and the element type the proxy should produce.
    """
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        for base, category in _SINGLE_SHAPES:
            if issubclass(annotation, base):
                return category, annotation

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin in _LIST_ORIGINS and len(args) == 1 and isinstance(args[0], type):
        for base, category in _LIST_SHAPES:
            if issubclass(args[0], base):
                return category, args[0]

    return FieldCategory.UNRECOGNIZED, None


def declared_annotations(cls: type) -> list[tuple[str, Any]]:
    """Annotations of ``cls`` and its bases, base classes first, in declaration order.

    Annotations that cannot be evaluated come back as ``None``.
    """
    fields: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, value in inspect.get_annotations(klass).items():
            if isinstance(value, str):
                value = _evaluate(klass, name, value)
                if value is None:
                    logger.debug("Unable to evaluate annotation of %s.%s", klass.__name__, name)
            fields[name] = value
    return list(fields.items())


def _evaluate(klass: type, name: str, annotation: str) -> Any:
    # Evaluated per field: an unresolvable name drops only its own field.
    holder = type(
        klass.__name__,
        (),
        {"__annotations__": {name: annotation}, "__module__": klass.__module__},
    )
    try:
        return typing.get_type_hints(holder, localns=dict(vars(klass)))[name]
    except (NameError, TypeError, SyntaxError):
        return None


def build_spec(cls: type, field_name: str, annotation: Any) -> FieldBindingSpec:
    declaration = inspect.getattr_static(cls, field_name, None)
    if field_name == WRAPPED_ELEMENT_FIELD or not isinstance(declaration, FieldDeclaration):
        return FieldBindingSpec(field_name, FieldCategory.UNRECOGNIZED, None, field_name)

    category, element_type = classify_annotation(annotation)
    locator = declaration.locator
    if locator is None and category in (
        FieldCategory.COMPOSITE_BLOCK,
        FieldCategory.COMPOSITE_BLOCK_LIST,
    ):
        locator = getattr(element_type, "__locator__", None)
    if locator is None:
        category, element_type = FieldCategory.UNRECOGNIZED, None

    return FieldBindingSpec(
        field_name=field_name,
        category=category,
        locator=locator,
        display_name=declaration.name or field_name,
        mark=declaration.mark,
        timeout_override=declaration.timeout,
        element_type=element_type,
    )


def build_schema(cls: type) -> tuple[FieldBindingSpec, ...]:
    return tuple(build_spec(cls, name, ann) for name, ann in declared_annotations(cls))
