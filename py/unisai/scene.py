"""
UNISAI In-Memory Scene

A concrete graph source: nodes, attachments and raw targets, plus the
rules that turn a raw target into the identifiers the exporter interns.

Example:
    >>> from unisai.scene import s
    >>> button = s.node("Button", label="UI")
    >>> handler = button.add_attachment(s.attachment("Handler"))
    >>> root = s.node("Canvas", button)
    >>> click = root.add_attachment(s.attachment("Clicker"))
    >>> click.add_listener("onClick", handler, "OnTap")
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import StructuralError
from .types import EventBinding, ListenerBinding, ReferenceField, RefKind


# ============================================================
# Raw targets
# ============================================================

@dataclass(frozen=True)
class AssetRef:
    """Persisted external data, identified by its guid."""
    guid: str
    path: str = ""


@dataclass(frozen=True)
class ExternalObject:
    """A target that is neither a node, an attachment nor a stored asset."""
    type_name: str


@dataclass
class RefSlot:
    """A named reference field holding a raw target."""
    field: str
    target: Any = None


@dataclass
class Listener:
    """A raw listener: target object plus method name."""
    target: Any = None
    method: str = ""


@dataclass
class Slot:
    """A named event slot."""
    name: str
    listeners: List[Listener] = field(default_factory=list)


def resolve_reference(target: Any) -> Tuple[Optional[str], RefKind]:
    """Identifier and kind for a reference target; None id means unresolved."""
    if target is None:
        return None, RefKind.NODE
    if isinstance(target, AssetRef):
        return target.guid or None, RefKind.ASSET
    if isinstance(target, Attachment):
        owner = target.owner
        return (owner.name() if owner is not None else "") or None, RefKind.ATTACHMENT
    if isinstance(target, Node):
        return target.name() or None, RefKind.NODE
    if isinstance(target, ExternalObject):
        return target.type_name or None, RefKind.ASSET
    return type(target).__name__, RefKind.ASSET


def resolve_listener(target: Any) -> Tuple[Optional[str], Optional[str]]:
    """(target name, target type) for a listener target."""
    if target is None:
        return None, None
    if isinstance(target, Attachment):
        owner = target.owner
        name = owner.name() if owner is not None else ""
        return name or None, target.type_label() or None
    if isinstance(target, Node):
        return target.name() or None, None
    if isinstance(target, AssetRef):
        return target.guid or None, None
    if isinstance(target, ExternalObject):
        return target.type_name or None, None
    return type(target).__name__, None


# ============================================================
# Graph source
# ============================================================

class Attachment:
    """A typed capability bound to a node."""

    def __init__(self, type_label: str, refs: Sequence[RefSlot] = (), events: Sequence[Slot] = ()):
        self._type_label = type_label
        self._refs: List[RefSlot] = list(refs)
        self._events: List[Slot] = list(events)
        self.owner: Optional[Node] = None

    def type_label(self) -> str:
        return self._type_label

    def reference_fields(self) -> List[ReferenceField]:
        result = []
        for ref in self._refs:
            target, kind = resolve_reference(ref.target)
            result.append(ReferenceField(ref.field, target, kind))
        return result

    def event_bindings(self) -> List[EventBinding]:
        result = []
        for slot in self._events:
            listeners = []
            for listener in slot.listeners:
                name, type_name = resolve_listener(listener.target)
                listeners.append(ListenerBinding(name, type_name, listener.method or None))
            result.append(EventBinding(slot.name, tuple(listeners)))
        return result

    def add_ref(self, field_name: str, target: Any = None) -> RefSlot:
        ref = RefSlot(field_name, target)
        self._refs.append(ref)
        return ref

    def slot(self, name: str) -> Slot:
        """Get or create the named event slot."""
        for existing in self._events:
            if existing.name == name:
                return existing
        created = Slot(name)
        self._events.append(created)
        return created

    def add_listener(self, slot_name: str, target: Any = None, method: str = "") -> Listener:
        listener = Listener(target, method)
        self.slot(slot_name).listeners.append(listener)
        return listener

    def __repr__(self) -> str:
        return f"Attachment({self._type_label!r})"


class Node:
    """A scene tree vertex."""

    def __init__(self, name: str, label: str = "", layer: int = 0, visible: bool = True):
        self._name = name
        self._label = label
        self._layer = layer
        self._visible = visible
        self._attachments: List[Attachment] = []
        self._children: List[Node] = []
        self._parent: Optional[Node] = None

    def name(self) -> str:
        return self._name

    def label(self) -> str:
        return self._label

    def layer(self) -> int:
        return self._layer

    def is_visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> None:
        self._visible = visible

    def attachments(self) -> List[Attachment]:
        return list(self._attachments)

    def children(self) -> List["Node"]:
        return list(self._children)

    def parent(self) -> Optional["Node"]:
        return self._parent

    def add_attachment(self, attachment: Attachment) -> Attachment:
        if attachment.owner is not None and attachment.owner is not self:
            raise StructuralError(f"attachment {attachment.type_label()!r} already bound", attachment.owner.path())
        attachment.owner = self
        self._attachments.append(attachment)
        return attachment

    def add_child(self, child: "Node") -> "Node":
        if child._parent is not None:
            raise StructuralError(f"node {child.name()!r} already has a parent", child._parent.path())
        node: Optional[Node] = self
        while node is not None:
            if node is child:
                raise StructuralError(f"adding {child.name()!r} would create a cycle", self.path())
            node = node._parent
        child._parent = self
        self._children.append(child)
        return child

    def attachment(self, type_label: str) -> Optional[Attachment]:
        """First attachment with the given type label."""
        for a in self._attachments:
            if a.type_label() == type_label:
                return a
        return None

    def child(self, name: str) -> Optional["Node"]:
        """First direct child with the given name."""
        for c in self._children:
            if c.name() == name:
                return c
        return None

    def path(self) -> str:
        parts = []
        node: Optional[Node] = self
        while node is not None:
            parts.append(node.name())
            node = node._parent
        return "/" + "/".join(reversed(parts))

    def __repr__(self) -> str:
        return f"Node({self._name!r}, children={len(self._children)})"


@dataclass
class Scene:
    """A named forest of root nodes."""
    name: str
    roots: List[Node] = field(default_factory=list)

    def find(self, path: str) -> Optional[Node]:
        """Find a node by its "/"-separated name path; first match wins."""
        names = [p for p in path.split("/") if p]
        if not names:
            return None
        node = next((r for r in self.roots if r.name() == names[0]), None)
        for name in names[1:]:
            if node is None:
                return None
            node = node.child(name)
        return node


# ============================================================
# Shorthand constructors
# ============================================================

class S:
    """Shorthand constructors for scene objects."""

    @staticmethod
    def node(name: str, *children: Node, label: str = "", layer: int = 0,
             visible: bool = True, attachments: Sequence[Attachment] = ()) -> Node:
        n = Node(name, label, layer, visible)
        for a in attachments:
            n.add_attachment(a)
        for c in children:
            n.add_child(c)
        return n

    @staticmethod
    def attachment(type_label: str, refs: Sequence[RefSlot] = (), events: Sequence[Slot] = ()) -> Attachment:
        return Attachment(type_label, refs, events)

    @staticmethod
    def ref(field_name: str, target: Any = None) -> RefSlot:
        return RefSlot(field_name, target)

    @staticmethod
    def slot(name: str, *listeners: Listener) -> Slot:
        return Slot(name, list(listeners))

    @staticmethod
    def listener(target: Any = None, method: str = "") -> Listener:
        return Listener(target, method)

    @staticmethod
    def asset(guid: str, path: str = "") -> AssetRef:
        return AssetRef(guid, path)

    @staticmethod
    def scene(name: str, *roots: Node) -> Scene:
        return Scene(name, list(roots))


s = S()


# ============================================================
# JSON Bridge
# ============================================================

def scene_from_json(data: Any) -> Scene:
    """
    Build a Scene from a plain scene description.

    Accepts {"name": ..., "roots": [...]} or a bare list of root nodes.
    Node targets ({"node": "/Root/Child"}, optionally with "attachment") are
    resolved once the whole forest exists; unknown paths stay unresolved.
    """
    if isinstance(data, list):
        data = {"name": "", "roots": data}
    if not isinstance(data, dict):
        raise ValueError("scene must be an object or a list of nodes")

    pending: List[Tuple[Any, Dict[str, Any]]] = []
    scene = Scene(str(data.get("name", "")))
    for item in _as_list(data.get("roots", []), "roots"):
        scene.roots.append(_node_from_json(item, pending))

    for holder, spec in pending:
        holder.target = _find_target(scene, spec)
    return scene


def _as_list(value: Any, what: str) -> List[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a list")
    return value


def _node_from_json(data: Any, pending: List[Tuple[Any, Dict[str, Any]]]) -> Node:
    if not isinstance(data, dict):
        raise ValueError("node must be an object")
    if "name" not in data:
        raise ValueError("node is missing 'name'")
    layer = data.get("layer", 0)
    if isinstance(layer, bool) or not isinstance(layer, int):
        raise ValueError("layer must be an integer")

    node = Node(
        str(data["name"]),
        str(data.get("label", "")),
        layer,
        bool(data.get("visible", True)),
    )
    for item in _as_list(data.get("attachments", []), "attachments"):
        node.add_attachment(_attachment_from_json(item, pending))
    for item in _as_list(data.get("children", []), "children"):
        node.add_child(_node_from_json(item, pending))
    return node


def _attachment_from_json(data: Any, pending: List[Tuple[Any, Dict[str, Any]]]) -> Attachment:
    if isinstance(data, str):
        return Attachment(data)
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError("attachment must be a type name or an object with 'type'")

    attachment = Attachment(str(data["type"]))
    for item in _as_list(data.get("refs", []), "refs"):
        if not isinstance(item, dict) or "field" not in item:
            raise ValueError("reference must be an object with 'field'")
        ref = attachment.add_ref(str(item["field"]))
        _target_from_json(ref, item, pending)
    for item in _as_list(data.get("events", []), "events"):
        if not isinstance(item, dict) or "slot" not in item:
            raise ValueError("event must be an object with 'slot'")
        slot = attachment.slot(str(item["slot"]))
        for entry in _as_list(item.get("listeners", []), "listeners"):
            if not isinstance(entry, dict):
                raise ValueError("listener must be an object")
            listener = Listener(method=str(entry.get("method", "") or ""))
            _target_from_json(listener, entry, pending)
            slot.listeners.append(listener)
    return attachment


def _target_from_json(holder: Any, spec: Dict[str, Any], pending: List[Tuple[Any, Dict[str, Any]]]) -> None:
    if spec.get("asset"):
        holder.target = AssetRef(str(spec["asset"]), str(spec.get("path", "")))
    elif spec.get("node"):
        pending.append((holder, spec))
    elif spec.get("type"):
        holder.target = ExternalObject(str(spec["type"]))


def _find_target(scene: Scene, spec: Dict[str, Any]) -> Any:
    node = scene.find(str(spec["node"]))
    if node is None:
        return None
    if spec.get("attachment"):
        return node.attachment(str(spec["attachment"]))
    return node
