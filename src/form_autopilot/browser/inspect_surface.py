"""Playwright rendering surface for inspect sessions."""

from typing import Any, Awaitable, Callable, Dict, Optional

from playwright.async_api import Page

from form_autopilot.browser import scripts
from form_autopilot.browser.highlight import INSPECT_KEY, HighlightRenderer
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)

BINDING_NAME = "__autopilotInspectEvent"
INSPECT_HINT = "Click a form to select it · Esc to cancel"

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class PlaywrightInspectSurface:
    """
    Installs the inspect overlay and page listeners.

    Page events travel back through a binding exposed once per page and are
    forwarded to ``event_handler`` (normally ``InspectController.handle_event``).
    """

    def __init__(self, page: Page, highlighter: HighlightRenderer, event_handler: Optional[EventHandler] = None):
        self.page = page
        self.highlighter = highlighter
        self.event_handler = event_handler
        self.logger = logger.bind(component="inspect_surface")
        self._binding_exposed = False

    def bind(self, event_handler: EventHandler) -> None:
        self.event_handler = event_handler

    async def _on_page_event(self, source: Any, payload: Dict[str, Any]) -> None:
        if self.event_handler is None:
            return
        await self.event_handler(payload or {})

    async def install_overlay(self) -> None:
        await self.highlighter.show(INSPECT_KEY, "html", INSPECT_HINT)

    async def remove_overlay(self) -> None:
        await self.highlighter.remove(INSPECT_KEY)

    async def install_listeners(self, cancel_key: str) -> None:
        if not self._binding_exposed:
            await self.page.expose_binding(BINDING_NAME, self._on_page_event)
            self._binding_exposed = True
        await self.page.evaluate(
            scripts.INSTALL_INSPECT_LISTENERS,
            {"binding": BINDING_NAME, "cancelKey": cancel_key}
        )
        self.logger.debug("Inspect listeners installed", cancel_key=cancel_key)

    async def remove_listeners(self) -> None:
        await self.page.evaluate(scripts.REMOVE_INSPECT_LISTENERS)

    async def frame(self, selector: str) -> None:
        await self.highlighter.show(INSPECT_KEY, selector, INSPECT_HINT)
