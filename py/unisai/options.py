"""
UNISAI Export Options
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ExportOpts:
    """Options for a compact export."""
    strict: bool = False
    skip_empty_slots: bool = True
    ensure_ascii: bool = False


def default_export_opts() -> ExportOpts:
    """Default options: unreadable attachments degrade to their type index."""
    return ExportOpts()


def strict_export_opts() -> ExportOpts:
    """Options that re-raise attachment read failures instead of degrading."""
    return ExportOpts(strict=True)
