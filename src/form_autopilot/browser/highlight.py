"""Ephemeral overlay highlights drawn over live page elements."""

from typing import Optional

from playwright.async_api import Page

from form_autopilot.browser import scripts
from form_autopilot.config import settings
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)

PREVIEW_KEY = "preview"
INSPECT_KEY = "inspect"


class HighlightRenderer:
    """
    Draws a bordered box and a label chip over a target element.

    The page keeps both in sync with the element's bounding box on scroll and
    resize. Highlights are keyed: showing a key again replaces the previous
    one, so at most one preview highlight exists at any time.
    """

    def __init__(self, page: Page, color: Optional[str] = None):
        self.page = page
        self.color = color or settings.highlight_color
        self.logger = logger.bind(component="highlight_renderer")
        self.preview_selector: Optional[str] = None

    async def show(self, key: str, selector: str, label: str = "") -> bool:
        """Show (or replace) the highlight stored under ``key``."""
        shown = await self.page.evaluate(
            scripts.SHOW_HIGHLIGHT,
            {"key": key, "selector": selector, "label": label, "color": self.color}
        )
        if not shown:
            self.logger.debug("Highlight target not found", key=key, selector=selector)
        return bool(shown)

    async def remove(self, key: str) -> None:
        """Remove the highlight stored under ``key``; a no-op when none is shown."""
        try:
            await self.page.evaluate(scripts.REMOVE_HIGHLIGHT, key)
        except Exception as e:
            self.logger.warning("Failed to remove highlight", key=key, error=str(e))

    async def show_preview(self, selector: str, label: str) -> bool:
        """Highlight a candidate container for review, replacing any earlier preview."""
        shown = await self.show(PREVIEW_KEY, selector, label)
        self.preview_selector = selector if shown else None
        self.logger.info("Preview highlight shown", selector=selector, shown=shown)
        return shown

    async def remove_preview(self) -> None:
        """Remove the preview highlight; always safe to call."""
        await self.remove(PREVIEW_KEY)
        self.preview_selector = None

    @property
    def preview_active(self) -> bool:
        return self.preview_selector is not None


def create_highlight_renderer(page: Page, color: Optional[str] = None) -> HighlightRenderer:
    """Factory function to create a highlight renderer."""
    return HighlightRenderer(page, color)
