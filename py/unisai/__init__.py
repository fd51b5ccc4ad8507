"""
UNISAI - Compact symbol-indexed scene export

Exports a scene tree (nodes, typed attachments, event listeners and
cross-references) as small JSON in which every string is stored once in a
symbol table and referenced everywhere else by index.

Example:
    >>> import unisai
    >>> from unisai import s
    >>>
    >>> weapon = s.node("Weapon", attachments=[s.attachment("Health")])
    >>> player = s.node("Player", weapon, label="Unit", attachments=[s.attachment("Health")])
    >>> print(unisai.export_text([player]))
    {"s":["Player","Unit","Health","Weapon"],"o":[{"n":0,"g":1,"l":0,"c":[2],"h":[{"n":3,"g":-1,"l":0,"c":[2],"h":[]}]}]}
"""

__version__ = "1.0.0"

# Core types
from .types import (
    SENTINEL,
    RefKind,
    ReferenceField,
    ListenerBinding,
    EventBinding,
    AttachmentInfo,
    SceneNode,
    SceneAttachment,
)

# Errors
from .errors import (
    ExportError,
    StructuralError,
    EncodingInvariantError,
)

# Options
from .options import (
    ExportOpts,
    default_export_opts,
    strict_export_opts,
)

# Passes
from .walk import iter_tree
from .symbols import SymbolTable, collect_symbols
from .encode import (
    Document,
    EncodedNode,
    EncodedAttachment,
    EncodedEvent,
    encode_forest,
)
from .emit import escape_string, emit_document

# In-memory scenes
from .scene import (
    Node,
    Attachment,
    AssetRef,
    ExternalObject,
    Scene,
    s,
    S,
    resolve_reference,
    resolve_listener,
    scene_from_json,
)

# Entry points
from .export import (
    export_forest,
    export_scene,
    export_node,
    export_text,
    save_compact,
)

# Convenient aliases
dumps = export_text

__all__ = [
    # Version
    "__version__",
    # Core types
    "SENTINEL",
    "RefKind",
    "ReferenceField",
    "ListenerBinding",
    "EventBinding",
    "AttachmentInfo",
    "SceneNode",
    "SceneAttachment",
    # Errors
    "ExportError",
    "StructuralError",
    "EncodingInvariantError",
    # Options
    "ExportOpts",
    "default_export_opts",
    "strict_export_opts",
    # Passes
    "iter_tree",
    "SymbolTable",
    "collect_symbols",
    "Document",
    "EncodedNode",
    "EncodedAttachment",
    "EncodedEvent",
    "encode_forest",
    "escape_string",
    "emit_document",
    # In-memory scenes
    "Node",
    "Attachment",
    "AssetRef",
    "ExternalObject",
    "Scene",
    "s",
    "S",
    "resolve_reference",
    "resolve_listener",
    "scene_from_json",
    # Entry points
    "dumps",
    "export_forest",
    "export_scene",
    "export_node",
    "export_text",
    "save_compact",
]
