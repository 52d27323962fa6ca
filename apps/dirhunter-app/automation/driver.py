"""
Playwright-backed driver.
Implements the browser capability used by the submission orchestrator and
the profiling pass on top of one BrowserAutomation page.
"""

from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browser import BrowserAutomation
from config import Settings
from errors import FieldFillFailed, FieldNotFound, SubmitButtonNotFound
from models import FieldMappingEntry, PageExtraction
from page_extractor import extract_page
from reveal import RevealControlResolver
from utils.simple_logger import slog


# Timeout for clicks and typing on a single element
ELEMENT_ACTION_TIMEOUT_MS = 10000

# Per-keystroke delays
TYPE_DELAY_MS = 50
TEXTAREA_TYPE_DELAY_MS = 30

CLICK_BY_TEXT_SCRIPT = """
(text) => {
    const elements = Array.from(document.querySelectorAll('button, a'));
    const element = elements.find(el => (el.textContent || '').includes(text));
    if (element) {
        element.click();
        return true;
    }
    return false;
}
"""


class PlaywrightDriver:
    """Browser capability over a single page: navigate, reveal, extract, fill, submit."""

    def __init__(self, browser: BrowserAutomation, settings: Settings):
        self.browser = browser
        self.settings = settings

    @property
    def page(self):
        return self.browser.page

    async def navigate(self, url: str) -> None:
        await self.browser.navigate(url)

    async def click_selector(self, selector: str) -> bool:
        """Click the first element matching the selector. False if none matched."""
        try:
            locator = self.page.locator(selector).first
            if await locator.count() == 0:
                return False
            await locator.click(timeout=ELEMENT_ACTION_TIMEOUT_MS)
            return True
        except PlaywrightError as e:
            slog.detail_debug(f"Click on {selector} failed: {e}")
            return False

    async def click_by_text(self, text: str) -> bool:
        """Click the first button or link whose text contains the given text."""
        try:
            return bool(await self.page.evaluate(CLICK_BY_TEXT_SCRIPT, text))
        except PlaywrightError as e:
            slog.detail_debug(f"Click by text '{text}' failed: {e}")
            return False

    async def reveal(self, snippet: str) -> None:
        """Raises RevealControlNotFound when no tier finds the control."""
        await RevealControlResolver(self).resolve(snippet)

    async def extract(self) -> PageExtraction:
        return await extract_page(self.page)

    async def fill_field(self, key: str, entry: FieldMappingEntry, value: str) -> None:
        """
        Fill one mapped field.

        Select fields choose the option by value or label. Everything else is
        cleared (triple-click select-all, then emptied) and typed into.

        Raises:
            FieldNotFound: if the selector matches nothing on the page
            FieldFillFailed: if the element rejects the value (wrong input
                type, detached, not editable...)
        """
        try:
            locator = self.page.locator(entry.selector).first
            found = await locator.count() > 0
        except PlaywrightError:
            found = False
        if not found:
            raise FieldNotFound(key, entry.selector)

        try:
            if entry.type == "select":
                await locator.select_option(value, timeout=ELEMENT_ACTION_TIMEOUT_MS)
                return

            delay = TEXTAREA_TYPE_DELAY_MS if entry.type == "textarea" else TYPE_DELAY_MS
            await locator.click(click_count=3, timeout=ELEMENT_ACTION_TIMEOUT_MS)
            await locator.fill("", timeout=ELEMENT_ACTION_TIMEOUT_MS)
            await locator.press_sequentially(value, delay=delay, timeout=ELEMENT_ACTION_TIMEOUT_MS)
        except PlaywrightError as e:
            raise FieldFillFailed(key, entry.selector, str(e)) from e

    async def submit(self, selector: str) -> bool:
        """
        Click the submit control and wait for a navigation.

        Returns:
            True if a navigation followed, False if none came within the
            submit navigation timeout (asynchronous submission)

        Raises:
            SubmitButtonNotFound: if the selector matches nothing or cannot be clicked
        """
        try:
            locator = self.page.locator(selector).first
            found = await locator.count() > 0
        except PlaywrightError:
            found = False
        if not found:
            raise SubmitButtonNotFound(selector)

        try:
            # timeout=0 would wait forever
            nav_timeout = max(self.settings.submit_navigation_timeout_ms, 1)
            async with self.page.expect_navigation(timeout=nav_timeout):
                try:
                    await locator.click(timeout=ELEMENT_ACTION_TIMEOUT_MS)
                except PlaywrightError as e:
                    raise SubmitButtonNotFound(selector) from e
            return True
        except PlaywrightTimeoutError:
            return False

    async def screenshot(self, name: str) -> Optional[str]:
        return await self.browser.take_screenshot(name)
