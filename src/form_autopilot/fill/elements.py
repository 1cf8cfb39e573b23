"""Live element contract the fill executor drives.

The executor owns every decision (which branch, which option, which
notifications in which order); an element host only supplies the primitive
reads and writes below. Any host able to dispatch input/change/blur style
notifications satisfies it: the Playwright host in
``form_autopilot.browser.elements`` is the production one.
"""

import html
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple


class ElementKind(str, Enum):
    """How a live element accepts a value."""
    RICH_TEXT = "rich_text"
    CHOICE = "choice"
    TOGGLE = "toggle"
    VALUE = "value"


class FillEvent(str, Enum):
    """Notifications emitted after a programmatic value change."""
    INPUT = "input"
    CHANGE = "change"
    BLUR = "blur"


# Toggles get no blur.
EVENT_SEQUENCES: Dict[ElementKind, Tuple[FillEvent, ...]] = {
    ElementKind.RICH_TEXT: (FillEvent.INPUT, FillEvent.CHANGE, FillEvent.BLUR),
    ElementKind.CHOICE: (FillEvent.INPUT, FillEvent.CHANGE, FillEvent.BLUR),
    ElementKind.TOGGLE: (FillEvent.INPUT, FillEvent.CHANGE),
    ElementKind.VALUE: (FillEvent.INPUT, FillEvent.CHANGE, FillEvent.BLUR),
}

TRUTHY_TOGGLE_VALUES = ("true", "1")

LINE_BREAK_MARKUP = "<br>"


def text_to_rich_markup(value: str) -> str:
    """Escape text for an editable region and turn newlines into line-break markup."""
    lines = value.replace("\r\n", "\n").split("\n")
    return LINE_BREAK_MARKUP.join(html.escape(line, quote=False) for line in lines)


class LiveElement(Protocol):
    """Primitive operations on one resolved page element."""

    async def kind(self) -> ElementKind: ...

    async def set_rich_text(self, markup: str) -> None: ...

    async def options(self) -> List[Tuple[str, str]]: ...

    async def select_value(self, value: str) -> None: ...

    async def value_attribute(self) -> str: ...

    async def set_checked(self, checked: bool) -> None: ...

    async def set_value(self, value: str) -> None: ...

    async def dispatch(self, event: FillEvent) -> None: ...


class ElementResolver(Protocol):
    """Re-resolves a selector to a live element at fill time."""

    async def resolve(self, selector: str) -> Optional[LiveElement]: ...
