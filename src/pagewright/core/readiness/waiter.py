"""Blocks until the readiness marks of a bound page object hold.

Fields are checked in declaration order:

* ``VISIBLE``: single and typed elements must report displayed. Element
  lists need every current match displayed. Typed and block lists only get
  their first member checked. Blocks are checked inside out: their own
  marked fields first, then the block root. Block fields search inside the
  root as it is currently rendered, so a re-rendered root is picked up.
* ``INVISIBLE``: absent, detached or not displayed.
* ``FORCE_VISIBLE``: the element's style is forced visible, no waiting.

A ``VISIBLE`` wait that hits a stale handle (typically a navigation in
flight) waits for the document to settle and is retried exactly once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from typing import Any, TypeVar

from ..binder.binder import bindings_of
from ..elements.element import Element
from ..errors import (
    ElementNotFound,
    ScriptExecutionFault,
    StaleReferenceFault,
    WaitTimeoutError,
)
from ..ir.model import FieldBindingSpec, FieldCategory, ReadinessMark, WaitPolicy
from ..locator.resolver import SearchContext
from ..proxy.factory import unwrap
from .document import DocumentReadyPoller

logger = logging.getLogger(__name__)

T = TypeVar("T")

FORCE_VISIBLE_SCRIPT = """el => {
    el.style.zIndex = '10000';
    el.style.visibility = 'visible';
    el.style.opacity = '1';
}"""


class ReadinessWaiter:
    def __init__(
        self,
        context: SearchContext,
        policy: WaitPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        document_poller: DocumentReadyPoller | None = None,
    ) -> None:
        self.context = context
        self.policy = policy or WaitPolicy()
        self._clock = clock
        self._sleep = sleep
        self.document_poller = document_poller or DocumentReadyPoller(
            context.document_ready, sleep=sleep
        )

    def await_ready(self, obj: Any, policy: WaitPolicy | None = None) -> None:
        """Wait for every marked field of ``obj``; raises ``WaitTimeoutError``."""
        self._await_fields(obj, policy or self.policy, None)

    def _await_fields(self, obj: Any, policy: WaitPolicy, outer_deadline: float | None) -> None:
        for spec in bindings_of(obj):
            if spec.mark is None:
                continue
            field_policy = policy.with_timeout(spec.timeout_override)
            value = getattr(obj, spec.field_name)
            logger.debug("Awaiting '%s' to be %s", spec.display_name, spec.mark.value)
            if spec.mark is ReadinessMark.VISIBLE:
                self._await_visible(spec, value, field_policy, outer_deadline)
            elif spec.mark is ReadinessMark.INVISIBLE:
                self._await_invisible(spec, value, field_policy, outer_deadline)
            else:
                self._force_visible(spec, value)

    def _deadline(self, policy: WaitPolicy, outer_deadline: float | None) -> float:
        deadline = self._clock() + policy.timeout
        return deadline if outer_deadline is None else min(deadline, outer_deadline)

    # --- visible ---

    def _await_visible(
        self,
        spec: FieldBindingSpec,
        value: Any,
        policy: WaitPolicy,
        outer_deadline: float | None,
    ) -> None:
        if spec.category is FieldCategory.TYPIFIED_ELEMENT_LIST:
            logger.debug("Checking only the first element of '%s'", spec.display_name)
            spec = replace(spec, category=FieldCategory.TYPIFIED_ELEMENT)
            value = value.first_lazy()
        elif spec.category is FieldCategory.COMPOSITE_BLOCK_LIST:
            logger.debug("Checking only the first block of '%s'", spec.display_name)
            spec = replace(spec, category=FieldCategory.COMPOSITE_BLOCK)
            value = value.first_lazy()

        if spec.category is FieldCategory.COMPOSITE_BLOCK:
            self._await_block_visible(spec, value, policy, outer_deadline)
            return

        if spec.category is FieldCategory.ELEMENT_LIST:
            probe: Callable[[], bool] = lambda: self._all_displayed(value)  # noqa: E731
        else:
            element = unwrap(value)
            probe = lambda: self._displayed(element)  # noqa: E731

        self._with_stale_recovery(
            spec,
            lambda deadline: self._poll(spec, "visible", probe, deadline, policy),
            self._deadline(policy, outer_deadline),
            lambda: self._deadline(policy, outer_deadline),
        )

    def _await_block_visible(
        self,
        spec: FieldBindingSpec,
        value: Any,
        policy: WaitPolicy,
        outer_deadline: float | None,
    ) -> None:
        logger.debug("Checking for visible elements inside block '%s'", spec.display_name)
        deadline = self._deadline(policy, outer_deadline)
        root = value.wrapped_element
        self._poll(spec, "present", lambda: self._present(root), deadline, policy)
        self._await_fields(value.anchored_block(), policy, deadline)

        self._with_stale_recovery(
            spec,
            lambda d: self._poll(spec, "visible", lambda: self._displayed(root), d, policy),
            deadline,
            lambda: self._deadline(policy, outer_deadline),
        )

    def _with_stale_recovery(
        self,
        spec: FieldBindingSpec,
        attempt: Callable[[float], T],
        deadline: float,
        retry_deadline: Callable[[], float],
    ) -> T:
        start = self._clock()
        try:
            return attempt(deadline)
        except StaleReferenceFault:
            logger.info(
                "Caught stale element reference while waiting for '%s' to be visible",
                spec.display_name,
            )

        self.document_poller.settle()
        try:
            return attempt(retry_deadline())
        except StaleReferenceFault as e:
            raise WaitTimeoutError(
                spec.display_name, "visible", self._clock() - start, cause=e
            ) from e

    @staticmethod
    def _displayed(element: Element) -> bool:
        try:
            return element.is_displayed()
        except ElementNotFound:
            return False

    @staticmethod
    def _all_displayed(elements: Any) -> bool:
        current = elements.resolve()
        return bool(current) and all(e.is_displayed() for e in current)

    @staticmethod
    def _present(element: Element) -> bool:
        try:
            return element.handle is not None
        except ElementNotFound:
            return False

    # --- invisible ---

    def _await_invisible(
        self,
        spec: FieldBindingSpec,
        value: Any,
        policy: WaitPolicy,
        outer_deadline: float | None,
    ) -> None:
        if spec.category.is_list:
            probe: Callable[[], bool] = lambda: all(  # noqa: E731
                self._hidden(unwrap(e)) for e in value.resolve()
            )
        else:
            element = unwrap(value)
            probe = lambda: self._hidden(element)  # noqa: E731
        self._poll(spec, "invisible", probe, self._deadline(policy, outer_deadline), policy)

    @staticmethod
    def _hidden(element: Element) -> bool:
        try:
            return not element.is_displayed()
        except (ElementNotFound, StaleReferenceFault):
            return True

    # --- force visible ---

    def _force_visible(self, spec: FieldBindingSpec, value: Any) -> None:
        if spec.category.is_list:
            targets = [unwrap(e) for e in value.resolve()]
        else:
            targets = [unwrap(value)]
        for element in targets:
            handle = element.handle
            try:
                element.context.execute_script(FORCE_VISIBLE_SCRIPT, handle)
            except ScriptExecutionFault as e:
                logger.warning("Unable to force '%s' visible: %s", spec.display_name, e)

    # --- polling ---

    def _poll(
        self,
        spec: FieldBindingSpec,
        condition: str,
        probe: Callable[[], T],
        deadline: float,
        policy: WaitPolicy,
    ) -> T:
        start = self._clock()
        while True:
            result = probe()
            if result:
                return result
            now = self._clock()
            if now >= deadline:
                raise WaitTimeoutError(spec.display_name, condition, now - start)
            self._sleep(min(policy.poll_interval, deadline - now))
