"""
UNISAI command line.

    unisai scene.json -o scene_compact.json
    unisai scene.json --select /Canvas/Button
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import List, Optional

from .emit import emit_document
from .errors import ExportError
from .export import export_node, export_scene, save_compact
from .options import ExportOpts
from .scene import scene_from_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="unisai",
        description="Export a scene description to compact symbol-indexed JSON",
    )
    ap.add_argument("scene", help="Path to a JSON scene description")
    ap.add_argument("-o", "--out", help="Output file (default: stdout)")
    ap.add_argument("--select", metavar="PATH", help="Export only the subtree at this node path")
    ap.add_argument("--strict", action="store_true", help="Fail on unreadable attachments")
    ap.add_argument("--ascii", action="store_true", help="Escape non-ASCII characters in symbols")
    ap.add_argument("--log-level", default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return ap


def setup_logging(level: str) -> None:
    """Console logging for command-line runs."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] [%(levelname)s] %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    opts = ExportOpts(strict=args.strict, ensure_ascii=args.ascii)

    try:
        with open(args.scene, "r", encoding="utf-8") as f:
            scene = scene_from_json(json.load(f))
    except (OSError, ValueError) as e:
        logger.error("cannot read scene %s: %s", args.scene, e)
        return 2

    try:
        if args.select:
            node = scene.find(args.select)
            if node is None:
                logger.error("no node at %s", args.select)
                return 2
            doc = export_node(node, opts)
        else:
            doc = export_scene(scene, opts)
    except ExportError as e:
        logger.error("export failed: %s", e)
        return 1

    if args.out:
        save_compact(doc, args.out, opts)
    else:
        sys.stdout.write(emit_document(doc, opts) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
