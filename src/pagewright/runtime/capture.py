"""Screenshot capture service client.

Screenshots are taken on the calling thread (the browser is single-threaded)
and posted to the capture service from the notification pool.
"""

from __future__ import annotations

import logging
import socket
from concurrent.futures import Future
from http import HTTPStatus
from typing import TYPE_CHECKING

import requests

from ..api.dto import Command, CreateExecution, CreateScreenshot
from ..config.settings import Settings, settings
from .events import NotificationPool, get_pool

if TYPE_CHECKING:
    from ..core.locator.resolver import BrowserDriver

logger = logging.getLogger(__name__)

EXECUTIONS_PATH = "/executions"
SCREENSHOT_PATH = "/screenshot"
REQUEST_TIMEOUT = 30.0


class CaptureClient:
    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def create_execution(self, message: CreateExecution) -> str | None:
        """Register a test execution; returns its id or None on failure."""
        try:
            response = self.session.post(
                self.base_url + EXECUTIONS_PATH,
                json=message.model_dump(by_alias=True),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Unable to create Capture execution: %s", e)
            return None
        if response.status_code != HTTPStatus.CREATED:
            logger.error(
                "Unable to create Capture execution. Status -> %s", response.status_code
            )
            return None
        return str(response.json()["executionID"])

    def send_screenshot(self, message: CreateScreenshot) -> bool:
        try:
            response = self.session.post(
                self.base_url + SCREENSHOT_PATH,
                json=message.model_dump(by_alias=True),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Failed sending screenshot to Capture: %s", e)
            return False
        if response.status_code != HTTPStatus.CREATED:
            logger.warning(
                "Failed sending screenshot to Capture. Status -> %s", response.status_code
            )
            return False
        return True


class ScreenshotCapture:
    """Page-ready observer that records a screenshot per loaded page."""

    def __init__(
        self,
        test_id: str,
        client: CaptureClient | None = None,
        pool: NotificationPool | None = None,
        config: Settings | None = None,
        node: str | None = None,
    ) -> None:
        config = config or settings
        if client is None:
            if not config.capture_url:
                raise ValueError("CAPTURE_URL is not configured")
            client = CaptureClient(config.capture_url)
        self.test_id = test_id
        self.client = client
        self.pool = pool or get_pool()

        logger.debug("About to initialise Capture execution for %s", test_id)
        self.execution_id = self.client.create_execution(
            CreateExecution(
                test_id=test_id,
                browser=config.browser,
                node=node or socket.getfqdn(),
                sut_name=config.sut_name,
                sut_version=config.sut_version,
            )
        )
        logger.debug("Capture executionID=%s", self.execution_id)

    @staticmethod
    def is_required(config: Settings | None = None) -> bool:
        return (config or settings).capture_required

    def notify_page_ready(self, page_name: str, driver: BrowserDriver) -> None:
        self.take_and_send_screenshot(Command(action="load", value=page_name), driver)

    def take_and_send_screenshot(
        self,
        command: Command,
        driver: BrowserDriver,
        error_message: str | None = None,
    ) -> Future | None:
        if self.execution_id is None:
            logger.error(
                "Can't send Screenshot. Capture didn't initialise execution for test: %s",
                self.test_id,
            )
            return None

        message = CreateScreenshot(
            execution_id=self.execution_id,
            command=command,
            url=driver.url(),
            error_message=error_message,
            screenshot=driver.screenshot_base64(),
        )
        return self.pool.submit(self._send, message)

    def _send(self, message: CreateScreenshot) -> bool:
        logger.debug("About to send screenshot to Capture for %s", self.test_id)
        sent = self.client.send_screenshot(message)
        if sent:
            logger.debug("Sent screenshot to Capture for %s", self.test_id)
        return sent
