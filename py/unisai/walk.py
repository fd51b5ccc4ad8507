"""
UNISAI Tree Walk

The single depth-first traversal shared by the symbol collector and the
encoder. Index assignment depends on both passes seeing the forest in the
same order, so neither pass walks the tree on its own.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Set

from .errors import StructuralError
from .options import ExportOpts
from .types import AttachmentInfo, EventBinding, SceneAttachment, SceneNode

logger = logging.getLogger(__name__)


@dataclass
class Visit:
    """One step of the walk."""
    node: SceneNode
    parent: Optional[SceneNode]
    path: str
    depth: int


def _display_name(node: Any) -> str:
    return node.name() or "?"


def iter_tree(roots: Iterable[SceneNode]) -> Iterator[Visit]:
    """
    Yield every node of the forest in preorder.

    Roots come in their given order; a node is yielded before its children,
    which follow in their given order. Uses an explicit stack, so depth is
    bounded by memory rather than the interpreter's recursion limit.

    Raises StructuralError when a node is reached twice (a cycle or a shared
    subtree) or when a child's parent() is not the node it was reached from.
    """
    visited: Set[int] = set()
    stack: List[Visit] = []
    for root in reversed(list(roots)):
        stack.append(Visit(root, None, "/" + _display_name(root), 0))

    while stack:
        visit = stack.pop()
        node = visit.node

        key = id(node)
        if key in visited:
            raise StructuralError("node reached twice (cycle or shared subtree)", visit.path)
        visited.add(key)

        if visit.parent is not None:
            _check_parent(visit)

        yield visit

        children = list(node.children())
        for child in reversed(children):
            stack.append(Visit(child, node, f"{visit.path}/{_display_name(child)}", visit.depth + 1))


def _check_parent(visit: Visit) -> None:
    parent_of = getattr(visit.node, "parent", None)
    if not callable(parent_of):
        return
    claimed = parent_of()
    if claimed is not visit.parent:
        raise StructuralError("child claims a different parent", visit.path)


# ============================================================
# Attachment snapshot
# ============================================================

def read_attachment(attachment: SceneAttachment, opts: ExportOpts, path: str = "") -> AttachmentInfo:
    """
    Read one attachment into an AttachmentInfo.

    Unresolved references are dropped here, and so are event slots without
    listeners when opts.skip_empty_slots is set. Any other failure degrades
    the attachment to its bare type (or the whole type to "" when even the
    label is unreadable) unless opts.strict is set.
    """
    try:
        type_label = attachment.type_label() or ""
    except Exception:
        if opts.strict:
            raise
        logger.warning("unreadable attachment type under %s", path, exc_info=True)
        return AttachmentInfo("", [], [])

    try:
        references = [ref for ref in attachment.reference_fields() if ref.resolved]
        events: List[EventBinding] = []
        for binding in attachment.event_bindings():
            listeners = tuple(binding.listeners)
            if not listeners and opts.skip_empty_slots:
                continue
            events.append(EventBinding(binding.slot, listeners))
    except Exception:
        if opts.strict:
            raise
        logger.warning("degrading attachment %r under %s to its type", type_label, path, exc_info=True)
        return AttachmentInfo(type_label, [], [])

    return AttachmentInfo(type_label, references, events)


def read_attachments(node: SceneNode, opts: ExportOpts, path: str = "") -> List[AttachmentInfo]:
    """Read every attachment of a node, in order. None entries are skipped."""
    return [
        read_attachment(attachment, opts, path)
        for attachment in node.attachments()
        if attachment is not None
    ]
