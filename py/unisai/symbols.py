"""
UNISAI Symbol Collection

First export pass: intern every string the encoded output will reference.

Collection order (the encoder's indices depend on it):
- nodes in preorder, roots first to last
- per node: name, label, then its attachments in order
- per attachment: type label, then each resolved reference (field name,
  target id), then each event slot (slot name, then per listener target
  name, target type, method)

Empty strings are never interned; they encode as the sentinel -1.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import EncodingInvariantError
from .options import ExportOpts, default_export_opts
from .types import SENTINEL, AttachmentInfo, SceneNode
from .walk import iter_tree, read_attachments

logger = logging.getLogger(__name__)


class SymbolTable:
    """
    Ordered, deduplicated string table owned by one export.

    Entries keep the position of their first insertion.
    """

    __slots__ = ('_index', '_symbols')

    def __init__(self, symbols: Iterable[str] = ()):
        self._index: Dict[str, int] = {}
        self._symbols: List[str] = []
        for s in symbols:
            self.add(s)

    def add(self, s: Optional[str]) -> int:
        """Intern s and return its index; empty or None returns the sentinel."""
        if not s:
            return SENTINEL
        idx = self._index.get(s)
        if idx is None:
            idx = len(self._symbols)
            self._index[s] = idx
            self._symbols.append(s)
        return idx

    def index(self, s: Optional[str]) -> int:
        """Look up s; empty or None gives the sentinel, unknown strings raise."""
        if not s:
            return SENTINEL
        try:
            return self._index[s]
        except KeyError:
            raise EncodingInvariantError(s) from None

    @property
    def symbols(self) -> List[str]:
        return list(self._symbols)

    def __contains__(self, s: object) -> bool:
        return s in self._index

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __getitem__(self, i: int) -> str:
        if i < 0:
            raise IndexError("sentinel index has no symbol")
        return self._symbols[i]

    def __repr__(self) -> str:
        return f"SymbolTable({self._symbols!r})"


def collect_attachment(table: SymbolTable, info: AttachmentInfo) -> None:
    """Intern the strings of one attachment snapshot."""
    table.add(info.type_label)
    for ref in info.references:
        table.add(ref.name)
        table.add(ref.target)
    for binding in info.events:
        table.add(binding.slot)
        for listener in binding.listeners:
            table.add(listener.target_name)
            table.add(listener.target_type)
            table.add(listener.method)


def collect_symbols(roots: Iterable[SceneNode], opts: Optional[ExportOpts] = None) -> SymbolTable:
    """Walk the forest once and build its symbol table."""
    if opts is None:
        opts = default_export_opts()

    table = SymbolTable()
    nodes = 0
    for visit in iter_tree(roots):
        node = visit.node
        table.add(node.name())
        table.add(node.label())
        for info in read_attachments(node, opts, visit.path):
            collect_attachment(table, info)
        nodes += 1

    logger.debug("collected %d symbols from %d nodes", len(table), nodes)
    return table
