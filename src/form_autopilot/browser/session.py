"""Browser session management using Playwright."""

from typing import Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from form_autopilot.config import settings
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)


class BrowserSession:
    """
    Owns one Chromium page that the autofill components operate on.

    The session only launches, navigates and closes; scanning, filling,
    highlighting and inspecting are separate components sharing ``page``.
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        viewport_size: Optional[Tuple[int, int]] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize the browser session.

        Args:
            headless: Run browser in headless mode
            viewport_size: Browser viewport size (width, height)
            timeout: Default operation timeout in seconds
        """
        self.headless = settings.browser_headless if headless is None else headless
        self.viewport_size = viewport_size or (settings.viewport_width, settings.viewport_height)
        self.timeout = timeout or settings.browser_timeout
        self.logger = logger.bind(component="browser_session")

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

        self.is_initialized = False
        self.current_url: Optional[str] = None

    async def initialize(self) -> Page:
        """
        Launch Chromium and open a page.

        Returns:
            The session page
        """
        if self.is_initialized:
            return self.page

        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(headless=self.headless)
        self.context = await self.browser.new_context(
            viewport={"width": self.viewport_size[0], "height": self.viewport_size[1]}
        )
        self.context.set_default_timeout(self.timeout * 1000)
        self.page = await self.context.new_page()

        self.is_initialized = True
        self.logger.info(
            "Browser session initialized",
            headless=self.headless,
            viewport_size=self.viewport_size
        )
        return self.page

    async def navigate_to(self, url: str) -> bool:
        """
        Navigate to a specific URL.

        Args:
            url: Target URL

        Returns:
            True if navigation successful, False otherwise
        """
        page = await self.initialize()
        try:
            await page.goto(url, wait_until="domcontentloaded")
            self.current_url = url
            self.logger.info("Navigated to URL", url=url, title=await page.title())
            return True
        except Exception as e:
            self.logger.error("Navigation failed", url=url, error=str(e))
            return False

    async def close(self) -> None:
        """Close the browser and cleanup resources."""
        try:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
            self.logger.info("Browser session closed")
        except Exception as e:
            self.logger.error("Error closing browser session", error=str(e))
        finally:
            self.is_initialized = False
            self.current_url = None
            self.page = None
            self.context = None
            self.browser = None
            self.playwright = None

    async def __aenter__(self) -> "BrowserSession":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def create_browser_session(
    headless: Optional[bool] = None,
    viewport_size: Optional[Tuple[int, int]] = None,
    timeout: Optional[int] = None
) -> BrowserSession:
    """Factory function to create a browser session."""
    return BrowserSession(headless=headless, viewport_size=viewport_size, timeout=timeout)
