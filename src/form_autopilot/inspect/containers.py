"""Nearest form-like container resolution over a generic element tree."""

import re
from typing import Optional, Protocol

CONTAINER_TAGS = ("form",)
CONTAINER_ROLES = ("form", "dialog", "alertdialog")
NON_CANDIDATE_TAGS = ("html", "body")
MIN_FILLABLE_DESCENDANTS = 2

# "login-form", "form_wrapper", "modalBody", "signupForm" but not "platform".
_NAMING_CONVENTION = re.compile(r"(?:^|[^a-z])(?:form|dialog|modal)", re.IGNORECASE)
_CAMEL_NAMING_CONVENTION = re.compile(r"[a-z0-9](?:Form|Dialog|Modal)")


class TreeNode(Protocol):
    """Tree navigation capability needed by the container walk."""

    @property
    def parent(self) -> Optional["TreeNode"]: ...

    @property
    def tag_name(self) -> str: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def fillable_descendant_count(self) -> int: ...


def _follows_naming_convention(value: Optional[str]) -> bool:
    if not value:
        return False
    for token in value.split():
        if _NAMING_CONVENTION.search(token) or _CAMEL_NAMING_CONVENTION.search(token):
            return True
    return False


def is_form_like(node: TreeNode) -> bool:
    """Whether a node reads as a form container."""
    if node.tag_name in CONTAINER_TAGS:
        return True
    if (node.get_attribute("role") or "").lower() in CONTAINER_ROLES:
        return True
    if _follows_naming_convention(node.get_attribute("id")):
        return True
    if _follows_naming_convention(node.get_attribute("class")):
        return True
    return node.fillable_descendant_count() >= MIN_FILLABLE_DESCENDANTS


def find_form_container(node: TreeNode) -> TreeNode:
    """
    Walk up from the hovered node to the first form-like container.

    The hovered node itself is considered first. The document root and body
    are never chosen; when nothing qualifies the hovered node is returned.
    """
    current = node
    while current is not None:
        if current.tag_name in NON_CANDIDATE_TAGS:
            break
        if is_form_like(current):
            return current
        current = current.parent
    return node
