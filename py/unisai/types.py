"""
UNISAI Core Types

Records read from a graph source, and the capability protocols a source
must provide. Both export passes only ever see a forest through these.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Protocol, Sequence, runtime_checkable


SENTINEL = -1


class RefKind(IntEnum):
    """What a reference field points at."""
    NODE = 0
    ASSET = 1
    ATTACHMENT = 2


@dataclass(frozen=True)
class ReferenceField:
    """A named link with its resolved target identifier (None if unresolved)."""
    name: str
    target: Optional[str]
    kind: RefKind = RefKind.NODE

    @property
    def resolved(self) -> bool:
        return bool(self.name) and bool(self.target)


@dataclass(frozen=True)
class ListenerBinding:
    """One listener; every part may be absent."""
    target_name: Optional[str] = None
    target_type: Optional[str] = None
    method: Optional[str] = None


@dataclass(frozen=True)
class EventBinding:
    """A named event slot and its listeners, in source order."""
    slot: str
    listeners: Sequence[ListenerBinding] = field(default_factory=tuple)


@dataclass(frozen=True)
class AttachmentInfo:
    """Snapshot of one attachment as both passes see it."""
    type_label: str
    references: List[ReferenceField]
    events: List[EventBinding]

    @property
    def is_simple(self) -> bool:
        return not self.references and not self.events


# ============================================================
# Graph source protocols
# ============================================================

@runtime_checkable
class SceneAttachment(Protocol):
    def type_label(self) -> str: ...

    def reference_fields(self) -> Sequence[ReferenceField]: ...

    def event_bindings(self) -> Sequence[EventBinding]: ...


@runtime_checkable
class SceneNode(Protocol):
    """
    Read-only view of one node.

    A source may also expose ``parent()``; when it does, the walker checks
    that every child points back at the node it was reached from.
    """

    def name(self) -> str: ...

    def label(self) -> str: ...

    def layer(self) -> int: ...

    def is_visible(self) -> bool: ...

    def attachments(self) -> Sequence[SceneAttachment]: ...

    def children(self) -> Sequence["SceneNode"]: ...
