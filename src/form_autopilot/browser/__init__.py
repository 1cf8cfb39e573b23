"""Playwright host: session, scanning, element access, highlights and inspect surface."""

from form_autopilot.browser.session import BrowserSession, create_browser_session
from form_autopilot.browser.scanner import PageScanner, create_page_scanner
from form_autopilot.browser.highlight import HighlightRenderer, create_highlight_renderer
from form_autopilot.browser.elements import PlaywrightElement, PlaywrightElementResolver
from form_autopilot.browser.inspect_surface import PlaywrightInspectSurface

__all__ = [
    "BrowserSession", "create_browser_session",
    "PageScanner", "create_page_scanner",
    "HighlightRenderer", "create_highlight_renderer",
    "PlaywrightElement", "PlaywrightElementResolver",
    "PlaywrightInspectSurface",
]
