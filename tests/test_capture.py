"""Tests for the screenshot capture client and page-ready observer."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from pagewright.api.dto import Command, CreateExecution, CreateScreenshot
from pagewright.config.settings import Settings
from pagewright.core.elements import Element
from pagewright.core.ir.model import VISIBLE, by, find_by
from pagewright.core.lifecycle.page import BasePage, PageLifecycle
from pagewright.runtime.capture import CaptureClient, ScreenshotCapture


def response(status, payload=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    return resp


class InlinePool:
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args):
        self.submitted.append((fn, args))
        fn(*args)
        return MagicMock()


@pytest.fixture
def session():
    session = MagicMock()
    session.post.return_value = response(201, {"executionID": 42})
    return session


@pytest.fixture
def config():
    return Settings(
        capture_url="http://capture.test/",
        sut_name="shop",
        sut_version="1.2.3",
        browser="firefox",
    )


class TestDto:
    def test_execution_uses_wire_names(self):
        message = CreateExecution(test_id="t1", browser="chromium", sut_name="shop", sut_version="1")

        assert message.model_dump(by_alias=True) == {
            "testID": "t1",
            "browser": "chromium",
            "node": "n/a",
            "softwareUnderTestName": "shop",
            "softwareUnderTestVersion": "1",
        }

    def test_screenshot_accepts_wire_names(self):
        message = CreateScreenshot.model_validate(
            {
                "executionID": "42",
                "command": {"action": "load", "value": "pages.Home"},
                "url": "http://shop.test/",
                "screenshot": "iVBORw0KGgo=",
            }
        )

        assert message.execution_id == "42"
        assert message.error_message is None
        assert message.command.using is None


class TestCaptureClient:
    """Tests for the capture service HTTP client."""

    def test_create_execution_returns_id(self, session):
        client = CaptureClient("http://capture.test/", session=session)

        execution_id = client.create_execution(CreateExecution(test_id="t1"))

        assert execution_id == "42"
        url = session.post.call_args.args[0]
        assert url == "http://capture.test/executions"
        assert session.post.call_args.kwargs["json"]["testID"] == "t1"

    def test_create_execution_requires_created_status(self, session, caplog):
        session.post.return_value = response(500)
        client = CaptureClient("http://capture.test", session=session)

        assert client.create_execution(CreateExecution(test_id="t1")) is None
        assert "Status -> 500" in caplog.text

    def test_create_execution_network_error(self, session):
        session.post.side_effect = requests.ConnectionError("refused")
        client = CaptureClient("http://capture.test", session=session)

        assert client.create_execution(CreateExecution(test_id="t1")) is None

    def test_send_screenshot(self, session):
        client = CaptureClient("http://capture.test", session=session)
        message = CreateScreenshot(
            execution_id="42", command=Command(action="load"), url="u", screenshot="s"
        )

        assert client.send_screenshot(message) is True
        assert session.post.call_args.args[0] == "http://capture.test/screenshot"

        session.post.return_value = response(400)
        assert client.send_screenshot(message) is False

        session.post.side_effect = requests.Timeout("slow")
        assert client.send_screenshot(message) is False


class TestScreenshotCapture:
    def test_registers_execution_on_creation(self, session, config):
        client = CaptureClient(config.capture_url, session=session)

        capture = ScreenshotCapture("LoginTest", client, InlinePool(), config, node="grid-1")

        assert capture.execution_id == "42"
        body = session.post.call_args.kwargs["json"]
        assert body == {
            "testID": "LoginTest",
            "browser": "firefox",
            "node": "grid-1",
            "softwareUnderTestName": "shop",
            "softwareUnderTestVersion": "1.2.3",
        }

    def test_page_ready_sends_a_load_screenshot(self, session, config, driver):
        pool = InlinePool()
        capture = ScreenshotCapture(
            "LoginTest", CaptureClient("http://capture.test", session=session), pool, config
        )
        driver.current_url = "http://shop.test/login"

        capture.notify_page_ready("pages.LoginPage", driver)

        assert len(pool.submitted) == 1
        body = session.post.call_args.kwargs["json"]
        assert body["executionID"] == "42"
        assert body["command"] == {"action": "load", "using": None, "value": "pages.LoginPage"}
        assert body["url"] == "http://shop.test/login"
        assert body["screenshot"] == "iVBORw0KGgo="

    def test_no_screenshot_without_execution(self, session, config, driver, caplog):
        session.post.return_value = response(503)
        pool = InlinePool()
        capture = ScreenshotCapture(
            "LoginTest", CaptureClient("http://capture.test", session=session), pool, config
        )

        assert capture.take_and_send_screenshot(Command(action="load"), driver) is None
        assert pool.submitted == []
        assert "Capture didn't initialise execution" in caplog.text

    def test_requires_a_capture_url(self):
        with pytest.raises(ValueError):
            ScreenshotCapture("LoginTest", pool=InlinePool(), config=Settings(capture_url=None))

    def test_is_required(self, config):
        assert ScreenshotCapture.is_required(config) is True
        assert ScreenshotCapture.is_required(Settings(capture_url="http://c", sut_name=None)) is False


class HomePage(BasePage):
    banner: Element = find_by(id="banner", mark=VISIBLE)


class TestLifecycleIntegration:
    def test_loaded_page_is_captured(self, session, config, driver, clock):
        driver.add(by(id="banner"))
        capture = ScreenshotCapture(
            "HomeTest", CaptureClient("http://capture.test", session=session), InlinePool(), config
        )
        lifecycle = PageLifecycle(
            driver, observers=[capture], framework_idle=False, clock=clock.time, sleep=clock.sleep
        )

        HomePage(driver, lifecycle).get()

        body = session.post.call_args.kwargs["json"]
        assert body["command"]["value"] == f"{__name__}.HomePage"

    def test_capture_outage_does_not_fail_the_page(self, session, config, driver, clock):
        driver.add(by(id="banner"))
        capture = ScreenshotCapture(
            "HomeTest", CaptureClient("http://capture.test", session=session), InlinePool(), config
        )
        session.post.side_effect = requests.ConnectionError("down")
        lifecycle = PageLifecycle(
            driver, observers=[capture], framework_idle=False, clock=clock.time, sleep=clock.sleep
        )

        page = HomePage(driver, lifecycle).get()

        assert page.state.value == "ready"
