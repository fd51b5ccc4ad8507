"""
UNISAI Export

Entry points that run both passes: collect the symbol table, then encode
against it. Each call owns its table; nothing is kept between calls.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .emit import emit_document
from .encode import Document, encode_forest
from .options import ExportOpts, default_export_opts
from .scene import Scene
from .symbols import collect_symbols
from .types import SceneNode

logger = logging.getLogger(__name__)


def export_forest(roots: Iterable[SceneNode], opts: Optional[ExportOpts] = None) -> Document:
    """
    Export a forest of root nodes to a Document.

    Raises StructuralError for malformed trees; no partial document is
    ever returned.
    """
    if opts is None:
        opts = default_export_opts()
    roots = list(roots)
    table = collect_symbols(roots, opts)
    return encode_forest(roots, table, opts)


def export_scene(scene: Scene, opts: Optional[ExportOpts] = None) -> Document:
    """Export every root of a scene."""
    logger.debug("exporting scene %r with %d roots", scene.name, len(scene.roots))
    return export_forest(scene.roots, opts)


def export_node(node: SceneNode, opts: Optional[ExportOpts] = None) -> Document:
    """Export one selected subtree as the single root of a document."""
    return export_forest([node], opts)


def export_text(roots: Iterable[SceneNode], opts: Optional[ExportOpts] = None) -> str:
    """Export a forest straight to compact text."""
    if opts is None:
        opts = default_export_opts()
    return emit_document(export_forest(roots, opts), opts)


def save_compact(
    document: Document,
    path: Union[str, Path],
    opts: Optional[ExportOpts] = None,
) -> Path:
    """Write a document as UTF-8 compact text, creating parent directories."""
    path = Path(path)
    # Encode before touching the file so a failure leaves nothing behind
    data = emit_document(document, opts).encode("utf-8")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("compact scene data saved to: %s", path)
    return path
