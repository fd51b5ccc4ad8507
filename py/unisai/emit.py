"""
UNISAI Text Emission

Writes a Document as compact JSON text (no whitespace). Only the symbol
strings are escaped; every other value is an integer.
"""

from __future__ import annotations
from typing import List, Optional

from .encode import Document, EncodedAttachment, EncodedNode
from .options import ExportOpts, default_export_opts


# ============================================================
# Escaping
# ============================================================

def escape_string(s: str, ensure_ascii: bool = False) -> str:
    """Escape a string for embedding between double quotes."""
    result = []
    for c in s:
        if c == '"':
            result.append('\\"')
        elif c == '\\':
            result.append('\\\\')
        elif c == '\n':
            result.append('\\n')
        elif c == '\r':
            result.append('\\r')
        elif c == '\t':
            result.append('\\t')
        elif ord(c) < 32:
            result.append(f"\\u{ord(c):04x}")
        elif 0xD800 <= ord(c) <= 0xDFFF:
            # Lone surrogates cannot be written as UTF-8
            result.append(f"\\u{ord(c):04x}")
        elif ensure_ascii and ord(c) > 127:
            result.append(_escape_non_ascii(ord(c)))
        else:
            result.append(c)
    return ''.join(result)


def _escape_non_ascii(code: int) -> str:
    if code <= 0xFFFF:
        return f"\\u{code:04x}"
    # Astral plane: UTF-16 surrogate pair
    code -= 0x10000
    high = 0xD800 + (code >> 10)
    low = 0xDC00 + (code & 0x3FF)
    return f"\\u{high:04x}\\u{low:04x}"


def quote(s: str, ensure_ascii: bool = False) -> str:
    return f'"{escape_string(s, ensure_ascii)}"'


# ============================================================
# Records
# ============================================================

def _triple(t) -> str:
    return f"[{t[0]},{t[1]},{t[2]}]"


def emit_attachment(a: EncodedAttachment) -> str:
    """Emit one attachment: a bare index, or a {"T":..} record."""
    if a.is_simple:
        return str(a.type)
    parts = [f'"T":{a.type}']
    if a.events:
        events = []
        for e in a.events:
            listeners = ",".join(_triple(t) for t in e.listeners)
            events.append(f'{{"f":{e.slot},"l":[{listeners}]}}')
        parts.append('"E":[' + ",".join(events) + "]")
    if a.refs:
        parts.append('"r":[' + ",".join(_triple(t) for t in a.refs) + "]")
    return "{" + ",".join(parts) + "}"


def _node_head(n: EncodedNode) -> str:
    head = f'{{"n":{n.name},"g":{n.label},"l":{n.layer},'
    if not n.visible:
        head += '"a":0,'
    attachments = ",".join(emit_attachment(a) for a in n.attachments)
    return head + f'"c":[{attachments}],"h":['


def emit_node(root: EncodedNode) -> str:
    """Emit a node and its subtree."""
    parts: List[str] = []
    # Work items are either pending nodes or literal closing text
    stack: list = [root]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        parts.append(_node_head(item))
        stack.append("]}")
        for i in range(len(item.children) - 1, -1, -1):
            stack.append(item.children[i])
            if i > 0:
                stack.append(",")
    return "".join(parts)


def emit_document(doc: Document, opts: Optional[ExportOpts] = None) -> str:
    """
    Emit a document as compact text:

        {"s":["Player","Unit",...],"o":[{"n":0,"g":1,"l":0,"c":[2],"h":[...]}]}
    """
    if opts is None:
        opts = default_export_opts()

    symbols = ",".join(quote(s, opts.ensure_ascii) for s in doc.symbols)
    roots = ",".join(emit_node(r) for r in doc.roots)
    return f'{{"s":[{symbols}],"o":[{roots}]}}'
