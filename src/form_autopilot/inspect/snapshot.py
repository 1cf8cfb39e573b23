"""Ancestor-chain snapshots reported by the page while inspecting."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SnapshotNode:
    """One element of a hovered element's ancestor chain."""
    tag: str
    selector: str
    attributes: Dict[str, str] = field(default_factory=dict)
    fillable_count: int = 0
    parent: Optional["SnapshotNode"] = None

    @property
    def tag_name(self) -> str:
        return self.tag.lower()

    def get_attribute(self, name: str) -> Optional[str]:
        value = self.attributes.get(name)
        return value or None

    def fillable_descendant_count(self) -> int:
        return self.fillable_count


def chain_from_payload(chain: List[Dict[str, Any]]) -> Optional[SnapshotNode]:
    """
    Link a hovered-first list of ancestor records into a node chain.

    Returns the hovered node, or None for an empty chain.
    """
    nodes = [
        SnapshotNode(
            tag=record.get("tag", ""),
            selector=record.get("selector", ""),
            attributes={k: v for k, v in (record.get("attributes") or {}).items() if v},
            fillable_count=int(record.get("fillableCount", 0) or 0),
        )
        for record in chain
    ]
    for child, parent in zip(nodes, nodes[1:]):
        child.parent = parent
    return nodes[0] if nodes else None
