"""Optional wait for front-end frameworks to finish pending work."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..errors import ScriptExecutionFault
from ..ir.model import WaitPolicy
from ..locator.resolver import SearchContext

logger = logging.getLogger(__name__)

IS_ANGULAR_JS = "() => typeof window.angular"

ANGULAR_REQUESTS_FINISHED_JS = """() => {
    const root = document.querySelector('[ng-app], [data-ng-app]') || document.body;
    try {
        const injector = window.angular.element(root).injector();
        if (!injector) { return true; }
        return injector.get('$http').pendingRequests.length === 0;
    } catch (e) {
        return true;
    }
}"""


def is_page_angular_js(context: SearchContext) -> bool:
    try:
        return context.execute_script(IS_ANGULAR_JS) == "object"
    except ScriptExecutionFault as e:
        logger.error("Detecting whether the page uses AngularJS failed: %s", e)
        return False


def wait_for_framework_idle(
    context: SearchContext,
    policy: WaitPolicy,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Wait for AngularJS ``$http`` requests to drain, if the page uses AngularJS.

    Returns False when the page did not become idle in time. That is only
    logged: the readiness wait still guards the marked elements.
    """
    if not is_page_angular_js(context):
        return True

    deadline = clock() + policy.timeout
    while True:
        try:
            if context.execute_script(ANGULAR_REQUESTS_FINISHED_JS):
                return True
        except ScriptExecutionFault as e:
            logger.debug("AngularJS idle probe failed: %s", e)
        now = clock()
        if now >= deadline:
            logger.warning("AngularJS requests still pending after %.1fs", policy.timeout)
            return False
        sleep(min(policy.poll_interval, deadline - now))
