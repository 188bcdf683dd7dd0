#!/usr/bin/env python3
"""Drive the-internet's "Dynamic Loading, example 2" page with page objects.

Usage:
    python scripts/dynamic_loading_example.py [--headed]

Set CAPTURE_URL, SUT_NAME and SUT_VERSION to also send a screenshot of every
loaded page to a capture service.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pagewright import (
    INVISIBLE,
    VISIBLE,
    BasePage,
    Button,
    HtmlElement,
    PageLifecycle,
    PagewrightError,
    TextBlock,
    find_by,
)
from pagewright.adapters.playwright import open_page
from pagewright.runtime.capture import ScreenshotCapture
from pagewright.runtime.events import get_pool
from pagewright.telemetry import init_telemetry, shutdown_telemetry

EXAMPLE_TWO_URL = "https://the-internet.herokuapp.com/dynamic_loading/2"


class DynamicLoadingExamplePage(BasePage):
    start_button: Button = find_by(css="#start button", mark=VISIBLE)
    # Not rendered until the start button is clicked.
    dynamic_element: HtmlElement = find_by(id="finish", mark=INVISIBLE, timeout=0)

    def click_start(self) -> FinishedLoadingPage:
        self.start_button.click()
        return FinishedLoadingPage(self.driver, self.lifecycle).get()


class FinishedLoadingPage(BasePage):
    loading: HtmlElement = find_by(id="loading", mark=INVISIBLE)
    finish: TextBlock = find_by(id="finish", mark=VISIBLE)

    def get_element_text(self) -> str:
        return self.finish.get_text()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--headed", action="store_true", help="show the browser window")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_telemetry()

    observers = []
    if ScreenshotCapture.is_required():
        observers.append(ScreenshotCapture("dynamic_loading_example"))

    try:
        with open_page(headless=not args.headed) as driver:
            lifecycle = PageLifecycle(driver, observers=observers)
            text = (
                DynamicLoadingExamplePage(driver, lifecycle)
                .get(EXAMPLE_TWO_URL)
                .then()
                .click_start()
                .get_element_text()
            )
            logging.getLogger(__name__).info("Dynamic element says: %s", text)
    except PagewrightError as e:
        logging.getLogger(__name__).error("Example failed: %s", e)
        return 1
    finally:
        get_pool().drain()
        shutdown_telemetry()
    return 0


if __name__ == "__main__":
    sys.exit(main())
