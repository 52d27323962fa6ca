"""
Browser automation with stealth features.
"""

import asyncio
import platform
from datetime import datetime
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright
from loguru import logger

from errors import ConstructionFailure, NavigationFailure, describe_navigation_error
from utils.helpers import get_app_data_directory, sanitize_filename
from utils.simple_logger import slog


LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--window-size=1920,1080",
]

STEALTH_SCRIPT = """
// Override navigator.webdriver
Object.defineProperty(navigator, 'webdriver', {
    get: () => undefined,
});

// Override navigator.languages
Object.defineProperty(navigator, 'languages', {
    get: () => ['en-US', 'en'],
});

// Fix chrome.runtime
window.chrome = {
    runtime: {},
};
"""


def _user_agent() -> str:
    """Platform-appropriate Chrome user agent."""
    system = platform.system()
    if system == "Darwin":
        return "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    if system == "Linux":
        return "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    return "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


class BrowserAutomation:
    """
    One browser page, owned by a single run.

    Use as an async context manager so the page, context, browser and
    Playwright engine are released on every exit path:

        async with BrowserAutomation(headless=True) as browser:
            await browser.navigate(url)
    """

    def __init__(self, headless: bool = False, navigation_timeout_ms: int = 30000):
        """
        Initialize browser automation.

        Args:
            headless: Run browser in headless mode
            navigation_timeout_ms: Timeout for navigation and element actions
        """
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def __aenter__(self) -> "BrowserAutomation":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def initialize(self):
        """
        Start Playwright and open a stealth page.

        Raises:
            ConstructionFailure: if no browser could be launched
        """
        slog.detail("🚀 Initializing browser automation...")
        slog.detail(f"   Headless mode: {self.headless}")

        try:
            self.playwright = await async_playwright().start()
            launch_options = {"headless": self.headless, "args": list(LAUNCH_ARGS)}

            try:
                self.browser = await self.playwright.chromium.launch(**launch_options)
                slog.detail_success("✅ Browser launched (Playwright Chromium)")
            except Exception as e:
                slog.detail_warning(f"⚠️ Could not launch bundled Chromium: {e}")
                slog.detail("🔄 Trying system Chrome as fallback...")
                launch_options["channel"] = "chrome"
                self.browser = await self.playwright.chromium.launch(**launch_options)
                slog.detail_success("✅ Browser launched (system Chrome)")

            self.context = await self.browser.new_context(
                viewport={"width": 1920, "height": 1080},
                user_agent=_user_agent(),
                locale="en-US",
                ignore_https_errors=True,
            )
            await self.context.add_init_script(STEALTH_SCRIPT)

            self.page = await self.context.new_page()
            self.page.set_default_timeout(self.navigation_timeout_ms)
            self.page.on("console", lambda msg: slog.detail_debug(f"Browser: {msg.text}"))
            self.page.on("dialog", lambda dialog: asyncio.create_task(dialog.accept()))
        except Exception as e:
            await self.close()
            raise ConstructionFailure(
                f"No browser available. Run 'playwright install chromium' or install Google Chrome. Error: {e}",
                cause=e,
            ) from e

        slog.detail_success("✅ Browser initialized with stealth features")

    async def navigate(self, url: str, wait_until: str = "domcontentloaded"):
        """
        Navigate to a URL.

        Args:
            url: URL to navigate to
            wait_until: Wait condition

        Raises:
            NavigationFailure: with a readable cause if the page did not load
        """
        slog.detail(f"Navigating to: {url}")
        try:
            response = await self.page.goto(url, wait_until=wait_until, timeout=self.navigation_timeout_ms)
        except Exception as e:
            cause = describe_navigation_error(str(e))
            raise NavigationFailure(url, cause) from e

        if response and response.ok:
            slog.detail_success(f"✅ Page loaded: {url}")
        else:
            # Error pages often still carry the form
            slog.detail_warning(f"Page status: {response.status if response else 'No response'}")

    async def take_screenshot(self, name: str = "screenshot") -> Optional[str]:
        """Take a full-page screenshot under the app data directory."""
        try:
            screenshots_dir = get_app_data_directory() / "screenshots"
            screenshots_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = screenshots_dir / f"{sanitize_filename(name, 'screenshot')}_{timestamp}.png"

            await self.page.screenshot(path=str(filepath), full_page=True)
            slog.detail(f"Screenshot saved: {filepath}")
            return str(filepath)

        except Exception as e:
            slog.detail_warning(f"Screenshot error: {e}")
            return None

    async def close(self):
        """Close browser and cleanup gracefully."""
        # Close in order: page -> context -> browser -> playwright
        if self.page:
            try:
                await self.page.close()
            except Exception as e:
                slog.detail_debug(f"Page close note: {e}")
            self.page = None

        if self.context:
            try:
                await self.context.close()
            except Exception as e:
                slog.detail_debug(f"Context close note: {e}")
            self.context = None

        if self.browser:
            try:
                await self.browser.close()
            except Exception as e:
                slog.detail_debug(f"Browser close note: {e}")
            self.browser = None

        if self.playwright:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.debug(f"Playwright stop note: {e}")
            self.playwright = None

        slog.detail("Browser closed")
