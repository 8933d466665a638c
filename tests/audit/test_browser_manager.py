"""Tests for codecheck.audit.browser.BrowserManager against a stubbed Playwright driver."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from playwright.async_api import Error as PlaywrightError

from codecheck.audit.browser import LAUNCH_ARGS, BrowserManager
from codecheck.errors import BrowserError


class StubPage:
    def __init__(self, close_error: Exception | None = None) -> None:
        self.close_error = close_error
        self.closed = False

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class StubBrowser:
    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.connected = True
        self.page = StubPage()
        self.new_page_error: Exception | None = None

    def is_connected(self) -> bool:
        return self.connected

    async def new_page(self) -> StubPage:
        if self.new_page_error is not None:
            raise self.new_page_error
        return self.page

    async def close(self) -> None:
        self.events.append("browser.close")
        self.connected = False


class StubChromium:
    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.browser = StubBrowser(events)
        self.launches: list[dict[str, Any]] = []
        self.error: Exception | None = None

    async def launch(self, **kwargs: Any) -> StubBrowser:
        self.events.append("launch")
        self.launches.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.browser


class StubDriver:
    def __init__(self) -> None:
        self.events: list[str] = []
        self.chromium = StubChromium(self.events)
        self.starts = 0

    async def stop(self) -> None:
        self.events.append("driver.stop")


class StubStarter:
    def __init__(self, driver: StubDriver) -> None:
        self.driver = driver

    async def start(self) -> StubDriver:
        self.driver.starts += 1
        return self.driver


@pytest.fixture
def driver(monkeypatch: pytest.MonkeyPatch) -> StubDriver:
    stub = StubDriver()
    monkeypatch.setattr("codecheck.audit.browser.async_playwright", lambda: StubStarter(stub))
    return stub


def test_start_twice_launches_once(driver: StubDriver) -> None:
    manager = BrowserManager(headless=True)

    async def run():
        await manager.start()
        await manager.start()

    asyncio.run(run())

    assert driver.starts == 1
    assert driver.chromium.launches == [{"headless": True, "args": LAUNCH_ARGS}]
    assert manager.is_running


def test_concurrent_starts_share_one_browser(driver: StubDriver) -> None:
    manager = BrowserManager()

    async def run():
        await asyncio.gather(manager.start(), manager.start(), manager.start())

    asyncio.run(run())

    assert len(driver.chromium.launches) == 1


def test_stop_closes_browser_before_driver_and_is_idempotent(driver: StubDriver) -> None:
    manager = BrowserManager()

    async def run():
        await manager.start()
        await manager.stop()
        await manager.stop()

    asyncio.run(run())

    assert driver.events == ["launch", "browser.close", "driver.stop"]
    assert not manager.is_running


def test_stop_without_start_does_nothing(driver: StubDriver) -> None:
    manager = BrowserManager()

    asyncio.run(manager.stop())

    assert driver.events == []
    assert not manager.is_running


def test_stop_after_browser_disconnected_still_stops_driver(driver: StubDriver) -> None:
    manager = BrowserManager()

    async def run():
        await manager.start()
        driver.chromium.browser.connected = False
        assert not manager.is_running
        await manager.stop()

    asyncio.run(run())

    assert driver.events == ["launch", "driver.stop"]


def test_launch_failure_raises_browser_error_and_stops_driver(driver: StubDriver) -> None:
    driver.chromium.error = PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")
    manager = BrowserManager()

    with pytest.raises(BrowserError, match="Failed to launch browser"):
        asyncio.run(manager.start())

    assert driver.events == ["launch", "driver.stop"]
    assert not manager.is_running


def test_start_retries_after_failed_launch(driver: StubDriver) -> None:
    driver.chromium.error = PlaywrightError("launch failed")
    manager = BrowserManager()

    async def run():
        with pytest.raises(BrowserError):
            await manager.start()
        driver.chromium.error = None
        await manager.start()

    asyncio.run(run())

    assert driver.starts == 2
    assert manager.is_running


def test_page_is_closed_after_use(driver: StubDriver) -> None:
    manager = BrowserManager()

    async def run():
        await manager.start()
        async with manager.page() as page:
            assert page is driver.chromium.browser.page
            assert not page.closed

    asyncio.run(run())

    assert driver.chromium.browser.page.closed


def test_page_close_failure_is_swallowed(driver: StubDriver) -> None:
    driver.chromium.browser.page = StubPage(close_error=PlaywrightError("Target closed"))
    manager = BrowserManager()

    async def run():
        await manager.start()
        async with manager.page():
            pass

    asyncio.run(run())

    assert driver.chromium.browser.page.closed


def test_page_close_failure_does_not_mask_body_error(driver: StubDriver) -> None:
    driver.chromium.browser.page = StubPage(close_error=PlaywrightError("Target closed"))
    manager = BrowserManager()

    async def run():
        await manager.start()
        async with manager.page():
            raise ValueError("check exploded")

    with pytest.raises(ValueError, match="check exploded"):
        asyncio.run(run())
    assert driver.chromium.browser.page.closed


def test_page_before_start_raises_browser_error(driver: StubDriver) -> None:
    manager = BrowserManager()

    async def run():
        async with manager.page():
            pass

    with pytest.raises(BrowserError, match="Browser instance is not available"):
        asyncio.run(run())


def test_new_page_failure_raises_browser_error(driver: StubDriver) -> None:
    driver.chromium.browser.new_page_error = PlaywrightError("Browser has been closed")
    manager = BrowserManager()

    async def run():
        await manager.start()
        async with manager.page():
            pass

    with pytest.raises(BrowserError, match="Browser instance is not available"):
        asyncio.run(run())
