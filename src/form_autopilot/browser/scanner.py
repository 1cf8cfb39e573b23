"""Page scanning: turns live forms into field descriptors."""

from typing import Optional

from playwright.async_api import Page

from form_autopilot.browser import scripts
from form_autopilot.core.models import FieldDescriptor, FormContainer, ScanOutcome
from form_autopilot.utils.logging import get_logger

logger = get_logger(__name__)


class PageScanner:
    """
    Scans the current page for fillable elements.

    Both scans return a ScanOutcome instead of raising, so callers branch on
    ``ok`` the same way for page and store collaborators.
    """

    def __init__(self, page: Page):
        self.page = page
        self.logger = logger.bind(component="page_scanner")

    async def scan_whole_forms(self) -> ScanOutcome:
        """Scan every top-level form on the page; forms without fields are omitted."""
        try:
            raw_forms = await self.page.evaluate(scripts.SCAN_WHOLE_FORMS)
        except Exception as e:
            self.logger.error("Form scan failed", error=str(e))
            return ScanOutcome(ok=False, error=f"Form scan failed: {e}")

        forms = [FormContainer(**raw) for raw in raw_forms]
        self.logger.info(
            "Scanned page forms",
            forms=len(forms),
            fields=sum(len(form.fields) for form in forms)
        )
        return ScanOutcome(ok=True, forms=forms, page_url=self.page.url)

    async def scan_container(self, selector: Optional[str] = None) -> ScanOutcome:
        """
        Scan fillable elements inside one container, or the whole document.

        Args:
            selector: Container selector; None scans the whole page

        Returns:
            ScanOutcome with the container's fields, page title and URL
        """
        try:
            raw = await self.page.evaluate(scripts.SCAN_CONTAINER, selector)
        except Exception as e:
            self.logger.error("Container scan failed", selector=selector, error=str(e))
            return ScanOutcome(ok=False, error=f"Container scan failed: {e}")

        if not raw.get("found"):
            self.logger.warning("Container not found", selector=selector)
            return ScanOutcome(ok=False, error=f"Element not found: {selector}")

        fields = [FieldDescriptor(**field) for field in raw.get("fields", [])]
        self.logger.info("Scanned container", selector=selector, fields=len(fields))
        return ScanOutcome(
            ok=True,
            fields=fields,
            title=raw.get("title") or None,
            page_url=raw.get("pageUrl")
        )


def create_page_scanner(page: Page) -> PageScanner:
    """Factory function to create a page scanner."""
    return PageScanner(page)
