"""Playwright host for the fill executor's live element contract."""

from typing import List, Optional, Tuple

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from form_autopilot.browser import scripts
from form_autopilot.core.errors import NoActiveTargetError
from form_autopilot.fill.elements import ElementKind, FillEvent


class PlaywrightElement:
    """A resolved element handle; a detached handle surfaces as NoActiveTargetError."""

    def __init__(self, handle: ElementHandle, selector: str):
        self.handle = handle
        self.selector = selector

    async def _evaluate(self, script: str, arg=None):
        try:
            if arg is None:
                return await self.handle.evaluate(script)
            return await self.handle.evaluate(script, arg)
        except PlaywrightError as e:
            raise NoActiveTargetError(f"Element vanished: {self.selector}", self.selector) from e

    async def kind(self) -> ElementKind:
        return ElementKind(await self._evaluate(scripts.ELEMENT_KIND))

    async def set_rich_text(self, markup: str) -> None:
        await self._evaluate(scripts.ELEMENT_SET_RICH_TEXT, markup)

    async def options(self) -> List[Tuple[str, str]]:
        return [(value, text) for value, text in await self._evaluate(scripts.ELEMENT_OPTIONS)]

    async def select_value(self, value: str) -> None:
        await self._evaluate(scripts.ELEMENT_SELECT_VALUE, value)

    async def value_attribute(self) -> str:
        return await self._evaluate(scripts.ELEMENT_VALUE_ATTRIBUTE) or ""

    async def set_checked(self, checked: bool) -> None:
        await self._evaluate(scripts.ELEMENT_SET_CHECKED, checked)

    async def set_value(self, value: str) -> None:
        await self._evaluate(scripts.ELEMENT_SET_VALUE, value)

    async def dispatch(self, event: FillEvent) -> None:
        await self._evaluate(scripts.ELEMENT_DISPATCH, event.value)


class PlaywrightElementResolver:
    """Resolves selectors against the current page on every call, never caching handles."""

    def __init__(self, page: Page):
        self.page = page

    async def resolve(self, selector: str) -> Optional[PlaywrightElement]:
        handles = await self.page.query_selector_all(selector)
        if not handles:
            return None
        if len(handles) > 1:
            raise NoActiveTargetError(
                f"Selector matches {len(handles)} elements: {selector}", selector
            )
        return PlaywrightElement(handles[0], selector)
