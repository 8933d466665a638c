# codecheck/audit/browser.py
"""
Browser-driven structural checks.

``BrowserManager`` owns the single Chromium instance for the life of the
service (started and stopped by the app lifespan). ``BrowserCheckRunner``
borrows one isolated page per file, renders the decoded markup and runs the
h1, image-alt and horizontal-overflow checks against the live DOM.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from codecheck.config import Settings, get_settings
from codecheck.errors import BrowserError
from codecheck.schemas import CheckLabel, CheckResult, FileCheckResult, FileChecks
from codecheck.audit.utils import decode_html_entities

logger = logging.getLogger(__name__)

MIN_WIDTH = 320
MAX_WIDTH = 1920
WIDTH_STEP = 10
VIEWPORT_HEIGHT = 1080

# Playwright wording differs between releases
_CLOSED_MARKERS = (
    "Target closed",
    "has been closed",
    "Browser closed",
    "Connection closed",
)

_COUNT_JS = "elements => elements.length"
_IMAGES_JS = """
images => images.map(img => ({
    src: img.src,
    alt: img.getAttribute('alt'),
    hasAlt: img.hasAttribute('alt'),
}))
"""
_OVERFLOW_JS = """
() => document.documentElement.scrollWidth > document.documentElement.clientWidth
"""

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class PageLoadError(Exception):
    """The raw file could not be loaded into the page."""


class BrowserManager:
    """Process-scoped Playwright driver + Chromium browser with explicit start/stop."""

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> None:
        async with self._lock:
            if self._browser is not None:
                return
            self._playwright = await async_playwright().start()
            try:
                self._browser = await self._playwright.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
            except PlaywrightError as exc:
                logger.error("Could not launch browser: %s", exc)
                await self._playwright.stop()
                self._playwright = None
                raise BrowserError("Failed to launch browser") from exc
            logger.info("Browser started (headless=%s)", self.headless)

    async def stop(self) -> None:
        async with self._lock:
            browser, self._browser = self._browser, None
            driver, self._playwright = self._playwright, None
            try:
                if browser is not None and browser.is_connected():
                    await browser.close()
            finally:
                if driver is not None:
                    await driver.stop()
            logger.info("Browser stopped")

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        if not self.is_running:
            raise BrowserError("Browser instance is not available")
        try:
            page = await self._browser.new_page()
        except PlaywrightError as exc:
            raise BrowserError("Browser instance is not available") from exc
        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as exc:
                # page already gone with the browser; the caller sees the real error
                logger.warning("Page close failed: %s", exc)


def h1_result(count: int) -> CheckResult:
    if count == 1:
        return CheckResult.passing()
    if count == 0:
        return CheckResult.failing("No h1 found")
    return CheckResult.failing(f"More than one h1 found ({count})")


def image_alts_result(images: List[Dict[str, Any]]) -> CheckResult:
    issues: List[str] = []

    for index, img in enumerate(images, start=1):
        alt = img.get("alt") or ""
        if not img.get("hasAlt"):
            issues.append(f"Image #{index} is missing alt attribute")
        elif alt.strip() == "":
            issues.append(f"Image #{index} has an empty alt attribute")
        elif "image" in alt.lower() or "picture" in alt.lower():
            issues.append(f'Image #{index} has alt text containing "image" or "picture": "{alt}"')

    if issues:
        return CheckResult.failing("Some images have issues with alt attributes", details=issues)
    return CheckResult.passing(f"All {len(images)} images have appropriate alt attributes")


def sweep_widths() -> range:
    return range(MIN_WIDTH, MAX_WIDTH + 1, WIDTH_STEP)


class BrowserCheckRunner:
    def __init__(self, browser: BrowserManager, settings: Optional[Settings] = None):
        self.browser = browser
        self.settings = settings or get_settings()

    def is_engine_failure(self, exc: BaseException) -> bool:
        if isinstance(exc, BrowserError):
            return True
        if not self.browser.is_running:
            return True
        return isinstance(exc, PlaywrightError) and any(m in str(exc) for m in _CLOSED_MARKERS)

    async def check_html_file(self, file_url: str, file_path: str) -> Tuple[FileCheckResult, str]:
        """
        Render one file and run the structural checks.
        Returns the result (with a placeholder W3C entry) and the decoded markup.
        """
        try:
            async with self.browser.page() as page:
                logger.info("Checking file: %s at URL: %s", file_path, file_url)
                response = await page.goto(
                    file_url,
                    wait_until="networkidle",
                    timeout=self.settings.NAVIGATION_TIMEOUT_MS,
                )
                if response is None or not response.ok:
                    status = response.status_text if response is not None else "no response"
                    raise PageLoadError(f"Failed to load page: {status}")

                raw_content = await response.text()
                decoded = decode_html_entities(raw_content)
                await page.set_content(decoded, timeout=self.settings.NAVIGATION_TIMEOUT_MS)

                result = await self.run_checks(page, file_path)
                logger.debug("Check results for %s: %s", file_path, result.model_dump_json(by_alias=True))
                return result, decoded
        except Exception as exc:
            if self.is_engine_failure(exc):
                if isinstance(exc, BrowserError):
                    raise
                raise BrowserError("Browser instance is not available") from exc
            logger.error("Error checking %s: %s", file_path, exc)
            raise

    async def run_checks(self, page: Page, file_name: str) -> FileCheckResult:
        single_h1 = await self._guarded(self.check_single_h1, page, "Error checking h1")
        image_alts = await self._guarded(self.check_image_alts, page, "Error checking image alts")
        scrollbar = await self._guarded(
            self.check_horizontal_scrollbar, page, "Error checking for horizontal scrollbar"
        )

        checks = FileChecks(
            single_h1=single_h1.labeled(CheckLabel.SINGLE_H1),
            image_alts=image_alts.labeled(CheckLabel.IMAGE_ALTS),
            w3c_validation=CheckResult.passing("W3C validation not performed in this service").labeled(
                CheckLabel.W3C_VALIDATION
            ),
            horizontal_scrollbar=scrollbar.labeled(CheckLabel.HORIZONTAL_SCROLLBAR),
        )
        return FileCheckResult(file_name=file_name, checks=checks)

    async def _guarded(
        self,
        check: Callable[[Page], Awaitable[CheckResult]],
        page: Page,
        error_prefix: str,
    ) -> CheckResult:
        """A failing check is recorded as 'fail'; a dead browser escalates."""
        try:
            return await check(page)
        except Exception as exc:
            if self.is_engine_failure(exc):
                raise BrowserError("Browser instance is not available") from exc
            logger.warning("%s: %s", error_prefix, exc)
            return CheckResult.failing(f"{error_prefix}: {exc}")

    async def check_single_h1(self, page: Page) -> CheckResult:
        count = await page.eval_on_selector_all("h1", _COUNT_JS)
        logger.debug("H1 count: %s", count)
        return h1_result(int(count))

    async def check_image_alts(self, page: Page) -> CheckResult:
        images = await page.eval_on_selector_all("img", _IMAGES_JS)
        return image_alts_result(images or [])

    async def check_horizontal_scrollbar(self, page: Page) -> CheckResult:
        for width in sweep_widths():
            await page.set_viewport_size({"width": width, "height": VIEWPORT_HEIGHT})
            if await page.evaluate(_OVERFLOW_JS):
                return CheckResult.failing(f"Horizontal scrollbar detected at {width}px width")
        return CheckResult.passing(f"No horizontal scrollbar detected for widths {MIN_WIDTH}px and above")
