"""Page objects and the bind -> await -> ready lifecycle."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from opentelemetry.trace import Status, StatusCode

from ...config.settings import settings
from ...telemetry import get_tracer
from ..binder.binder import ElementBinder
from ..errors import PageLifecycleError, ScriptExecutionFault
from ..ir.model import WaitPolicy
from ..locator.resolver import BrowserDriver, SearchContext
from ..proxy.factory import unwrap
from ..readiness.waiter import FORCE_VISIBLE_SCRIPT, ReadinessWaiter
from .framework import wait_for_framework_idle

logger = logging.getLogger(__name__)

P = TypeVar("P", bound="BasePage")


class PageState(str, Enum):
    UNBOUND = "unbound"
    BINDING = "binding"
    AWAITING_READY = "awaiting_ready"
    READY = "ready"
    FAILED = "failed"


@runtime_checkable
class PageReadyObserver(Protocol):
    """Receives a best-effort notification once a page is ready."""

    def notify_page_ready(self, page_name: str, driver: BrowserDriver) -> None: ...


def default_policy() -> WaitPolicy:
    return WaitPolicy(timeout=settings.timeout, poll_interval=settings.poll_interval)


class PageLifecycle:
    """Drives a page object from UNBOUND to READY (or FAILED).

    Usage:
        lifecycle = PageLifecycle(driver, observers=[capture])
        page = lifecycle.enter(LoginPage(driver), url="https://example.com/login")
    """

    def __init__(
        self,
        driver: BrowserDriver,
        policy: WaitPolicy | None = None,
        observers: Iterable[PageReadyObserver] = (),
        binder: ElementBinder | None = None,
        framework_idle: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.driver = driver
        self.context = SearchContext(driver)
        self.policy = policy or default_policy()
        self.observers = list(observers)
        self.binder = binder or _shared_binder
        self.framework_idle = settings.framework_idle if framework_idle is None else framework_idle
        self._clock = clock
        self._sleep = sleep

    def enter(self, page: P, url: str | None = None, timeout: float | None = None) -> P:
        if page.state is not PageState.UNBOUND:
            raise PageLifecycleError(
                f"{type(page).__name__} is already {page.state.value}; "
                "create a new page object for a new navigation"
            )

        page_name = f"{type(page).__module__}.{type(page).__qualname__}"
        policy = self.policy.with_timeout(timeout)

        with get_tracer().start_as_current_span("page.load") as span:
            span.set_attribute("page.name", page_name)
            try:
                if url:
                    self.driver.navigate(url)
                page._transition(PageState.BINDING)
                self.binder.bind(page, self.context)
                page._transition(PageState.AWAITING_READY)
                if self.framework_idle:
                    wait_for_framework_idle(self.context, policy, self._clock, self._sleep)
                ReadinessWaiter(self.context, policy, self._clock, self._sleep).await_ready(page)
            except Exception as e:
                page._fail(e)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error("Error while waiting for page %s to load: %s", page_name, e)
                raise
            page._transition(PageState.READY)

        logger.info("Page '%s' successfully loaded", page_name)
        self._notify_page_ready(page_name)
        return page

    def _notify_page_ready(self, page_name: str) -> None:
        for observer in self.observers:
            try:
                observer.notify_page_ready(page_name, self.driver)
            except Exception:  # noqa: BLE001 - reporting must never fail a loaded page
                logger.exception("Error logging page load, but loaded successfully")


_shared_binder = ElementBinder()


class BasePage:
    """Base class for page objects.

    Declare element fields with annotations and ``find_by``:

        class DynamicLoadingPage(BasePage):
            start_button: Button = find_by(css="#start button", mark=VISIBLE)
            finish: HtmlElement = find_by(id="finish", mark=INVISIBLE, timeout=0)
    """

    def __init__(self, driver: BrowserDriver, lifecycle: PageLifecycle | None = None) -> None:
        self.driver = driver
        self.lifecycle = lifecycle or PageLifecycle(driver)
        self._state = PageState.UNBOUND
        self._failure: BaseException | None = None

    @classmethod
    def open(
        cls: type[P],
        driver: BrowserDriver,
        url: str | None = None,
        timeout: float | None = None,
        lifecycle: PageLifecycle | None = None,
    ) -> P:
        """Create a new page object and wait for it to be ready."""
        return cls(driver, lifecycle).get(url, timeout)

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def failure(self) -> BaseException | None:
        return self._failure

    def _transition(self, state: PageState) -> None:
        logger.debug("%s: %s -> %s", type(self).__name__, self._state.value, state.value)
        self._state = state

    def _fail(self, cause: BaseException) -> None:
        self._failure = cause
        self._transition(PageState.FAILED)

    def get(self: P, url: str | None = None, timeout: float | None = None) -> P:
        return self.lifecycle.enter(self, url, timeout)

    def then(self: P) -> P:
        return self

    def with_(self: P) -> P:
        return self

    def execute_js(self, script: str, arg: Any = None) -> Any:
        """Run a script in the page; failures are logged and return None."""
        try:
            return self.driver.execute_script(script, arg)
        except ScriptExecutionFault as e:
            logger.error("Javascript execution failed: %s", e)
            logger.debug("Failed Javascript: %s", script)
            return None

    def force_visible(self, element: Any) -> None:
        self.driver.execute_script(FORCE_VISIBLE_SCRIPT, unwrap(element).handle)

    @property
    def title(self) -> str:
        return self.driver.title()

    @property
    def source(self) -> str:
        return self.driver.page_source()
