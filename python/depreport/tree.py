"""Pruning of the dependency tree against the resolved artifact set."""

import logging
from dataclasses import dataclass, field
from typing import Collection, List, Optional

from .models import Artifact, DependencyNode

logger = logging.getLogger(__name__)


class IdSequence:
    """Per-run generator of element identifiers such as _1, _2, ..."""

    def __init__(self, prefix: str = "_"):
        self.prefix = prefix
        self._counter = 0

    def next_id(self) -> str:
        self._counter += 1
        return f"{self.prefix}{self._counter}"


@dataclass
class FilteredNode:
    """
    A dependency tree node that survived filtering.

    Attributes:
        artifact: The node's artifact
        detail_id: Identifier of the node's detail panel
        toggle_id: Identifier of the marker toggling the detail panel
        children: Surviving children, in input order
        details: Optional detail panel content, filled in by the report builder
        is_root: Whether this is the project node at the top of the tree
    """

    artifact: Artifact
    detail_id: str
    toggle_id: str
    children: List['FilteredNode'] = field(default_factory=list)
    details: Optional[dict] = None
    is_root: bool = False

    @property
    def label(self) -> str:
        """Display label: the artifact id followed by its scope, which the project root omits."""
        if self.is_root:
            return f"{self.artifact.id} "
        return f"{self.artifact.id} ({self.artifact.scope.value}) "

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


def _filter_node(node: DependencyNode, keep: Collection[Artifact], ids: IdSequence) -> FilteredNode:
    filtered = FilteredNode(
        artifact=node.artifact,
        detail_id=ids.next_id(),
        toggle_id=ids.next_id()
    )

    for child in node.children:
        if child.artifact not in keep:
            logger.debug(f"Pruning {child.artifact.id} under {node.artifact.id}: not in resolved set")
            continue
        filtered.children.append(_filter_node(child, keep, ids))

    return filtered


def filter_tree(
    node: DependencyNode,
    keep: Collection[Artifact],
    ids: Optional[IdSequence] = None
) -> FilteredNode:
    """
    Copy a dependency tree keeping only children whose artifact is in the keep set.

    The root is always kept and marked as the project root. A child missing
    from the keep set is dropped together with its whole subtree, even if some
    descendants are in the keep set. Identifiers are assigned in pre-order:
    detail id, then toggle id.
    """
    if ids is None:
        ids = IdSequence()
    if not isinstance(keep, (set, frozenset)):
        keep = set(keep)

    filtered = _filter_node(node, keep, ids)
    filtered.is_root = True
    return filtered
