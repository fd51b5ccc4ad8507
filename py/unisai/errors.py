"""
UNISAI Errors
"""


class ExportError(Exception):
    """Base class for all export failures."""


class StructuralError(ExportError):
    """The source forest is not a tree (cycle, shared subtree, bad parent link)."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        if path:
            message = f"{message} at {path}"
        super().__init__(message)


class EncodingInvariantError(ExportError):
    """The encoder met a string the collector never interned."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"string not in symbol table: {value!r}")
