"""
UNISAI Compact Encoder

Second export pass: re-emit the forest with every string replaced by its
index in the symbol table built by the first pass.

Record layout (short keys, see emit.py for the text form):
- node -> {"n": name, "g": label, "l": layer, ["a": 0,] "c": [...], "h": [...]}
  "a" is only present for hidden nodes; a missing "a" means visible.
- attachment -> type index, or {"T": type, ["E": [...]], ["r": [...]]} when it
  carries events or references
- event slot -> {"f": slot, "l": [[target_name, target_type, method], ...]}
  absent listener parts are -1
- reference -> [field, target, kind]; unresolved references are left out
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .options import ExportOpts, default_export_opts
from .symbols import SymbolTable
from .types import AttachmentInfo, SceneNode
from .walk import Visit, iter_tree, read_attachments

logger = logging.getLogger(__name__)

Triple = Tuple[int, int, int]


# ============================================================
# Encoded records
# ============================================================

@dataclass
class EncodedEvent:
    """One event slot with its listener triples."""
    slot: int
    listeners: List[Triple]

    def to_json(self) -> Dict[str, Any]:
        return {"f": self.slot, "l": [list(t) for t in self.listeners]}


@dataclass
class EncodedAttachment:
    """An attachment; simple ones collapse to their type index."""
    type: int
    events: List[EncodedEvent] = field(default_factory=list)
    refs: List[Triple] = field(default_factory=list)

    @property
    def is_simple(self) -> bool:
        return not self.events and not self.refs

    def to_json(self) -> Any:
        if self.is_simple:
            return self.type
        result: Dict[str, Any] = {"T": self.type}
        if self.events:
            result["E"] = [e.to_json() for e in self.events]
        if self.refs:
            result["r"] = [list(t) for t in self.refs]
        return result


@dataclass
class EncodedNode:
    """One node with its encoded attachments and children."""
    name: int
    label: int
    layer: int
    visible: bool = True
    attachments: List[EncodedAttachment] = field(default_factory=list)
    children: List["EncodedNode"] = field(default_factory=list)

    def fields_json(self) -> Dict[str, Any]:
        """The node's own fields, without children."""
        result: Dict[str, Any] = {"n": self.name, "g": self.label, "l": self.layer}
        if not self.visible:
            result["a"] = 0
        result["c"] = [a.to_json() for a in self.attachments]
        return result

    def to_json(self) -> Dict[str, Any]:
        # Iterative so deep trees do not hit the recursion limit
        root = self.fields_json()
        root["h"] = []
        stack = [(self, root)]
        while stack:
            node, out = stack.pop()
            for child in node.children:
                child_out = child.fields_json()
                child_out["h"] = []
                out["h"].append(child_out)
                stack.append((child, child_out))
        return root

    def iter_nodes(self) -> Iterator["EncodedNode"]:
        """Yield this node and all descendants in preorder."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass
class Document:
    """Result of one export: the symbol list plus the encoded roots."""
    symbols: List[str]
    roots: List[EncodedNode]

    def to_json(self) -> Dict[str, Any]:
        return {"s": list(self.symbols), "o": [r.to_json() for r in self.roots]}

    def iter_nodes(self) -> Iterator[EncodedNode]:
        for root in self.roots:
            yield from root.iter_nodes()

    def symbol(self, index: int) -> Optional[str]:
        """Dereference an index; the sentinel gives None."""
        if index < 0:
            return None
        return self.symbols[index]

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_nodes())


# ============================================================
# Encoding
# ============================================================

def encode_attachment(info: AttachmentInfo, table: SymbolTable) -> EncodedAttachment:
    """Encode one attachment snapshot against the table."""
    encoded = EncodedAttachment(table.index(info.type_label))
    for binding in info.events:
        listeners = [
            (
                table.index(listener.target_name),
                table.index(listener.target_type),
                table.index(listener.method),
            )
            for listener in binding.listeners
        ]
        encoded.events.append(EncodedEvent(table.index(binding.slot), listeners))
    for ref in info.references:
        encoded.refs.append((table.index(ref.name), table.index(ref.target), int(ref.kind)))
    return encoded


def encode_node(visit: Visit, table: SymbolTable, opts: ExportOpts) -> EncodedNode:
    """Encode a node's own fields and attachments; children are left empty."""
    node = visit.node
    return EncodedNode(
        name=table.index(node.name()),
        label=table.index(node.label()),
        layer=int(node.layer()),
        visible=bool(node.is_visible()),
        attachments=[
            encode_attachment(info, table)
            for info in read_attachments(node, opts, visit.path)
        ],
    )


def encode_forest(
    roots: Iterable[SceneNode],
    table: SymbolTable,
    opts: Optional[ExportOpts] = None,
) -> Document:
    """
    Encode the forest against a table built by collect_symbols.

    The table must come from the same forest with the same options; a string
    missing from it raises EncodingInvariantError.
    """
    if opts is None:
        opts = default_export_opts()

    encoded_roots: List[EncodedNode] = []
    by_node: Dict[int, EncodedNode] = {}

    for visit in iter_tree(roots):
        encoded = encode_node(visit, table, opts)
        if visit.parent is None:
            encoded_roots.append(encoded)
        else:
            by_node[id(visit.parent)].children.append(encoded)
        by_node[id(visit.node)] = encoded

    logger.debug("encoded %d nodes under %d roots", len(by_node), len(encoded_roots))
    return Document(table.symbols, encoded_roots)
