"""Error taxonomy for the assembly pipeline.

Every stage raises a subclass of `AssemblyError`; the CLI is the only place
that turns them into exit codes. Leaf errors carry the context needed to
diagnose a failure without re-running (slot name, resource name, size vs
ceiling).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


class AssemblyError(RuntimeError):
    """Base class for all pipeline failures."""


@dataclass
class ResourceNotFound(AssemblyError):
    name: str
    searched: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.searched:
            return f"resource not found: {self.name!r} (searched: {', '.join(self.searched)})"
        return f"resource not found: {self.name!r}"


@dataclass
class ResourceReadError(AssemblyError):
    name: str
    path: str = ""
    reason: str = ""

    def __str__(self) -> str:
        where = f" at {self.path}" if self.path else ""
        why = f": {self.reason}" if self.reason else ""
        return f"failed to read resource {self.name!r}{where}{why}"


class SlotError(AssemblyError):
    """Malformed, overlapping or mis-typed slot markers."""


@dataclass
class UnresolvedSlot(SlotError):
    name: str
    detail: str = ""

    def __str__(self) -> str:
        msg = f"unresolved slot: {self.name!r}"
        return f"{msg} ({self.detail})" if self.detail else msg


@dataclass
class DuplicateSlot(SlotError):
    name: str
    count: int = 2

    def __str__(self) -> str:
        return f"duplicate slot: {self.name!r} declared {self.count} times"


@dataclass
class SerializationError(AssemblyError):
    path: str
    reason: str

    def __str__(self) -> str:
        return f"cannot serialize payload at {self.path}: {self.reason}"


@dataclass
class SizeBudgetExceeded(AssemblyError):
    size: int
    ceiling: int
    breakdown: Tuple[Tuple[str, int], ...] = field(default=())

    def __str__(self) -> str:
        from .budget import format_bytes

        msg = (
            f"assembled document is {format_bytes(self.size)} ({self.size} bytes), "
            f"over the {format_bytes(self.ceiling)} ({self.ceiling} bytes) ceiling"
        )
        if self.breakdown:
            parts = ", ".join(f"{name}={format_bytes(n)}" for name, n in self.breakdown)
            msg += f"; largest slots: {parts}"
        return msg


@dataclass
class IncludeDepthExceeded(AssemblyError):
    name: str
    rounds: int

    def __str__(self) -> str:
        return f"include expansion in {self.name!r} exceeded {self.rounds} rounds (recursive include?)"


__all__ = [
    "AssemblyError",
    "DuplicateSlot",
    "IncludeDepthExceeded",
    "ResourceNotFound",
    "ResourceReadError",
    "SerializationError",
    "SizeBudgetExceeded",
    "SlotError",
    "UnresolvedSlot",
]
