# websummary/config.py
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional, Tuple

# ~10 MB keeps the report attachable to most mail systems.
DEFAULT_SIZE_CEILING_BYTES = 10 * 1024 * 1024

DEFAULT_DATA_VARIABLE = "data"
DEFAULT_DATA_SLOT = "data"

MINIFIED_MODES = ("auto", "always", "never")

_JS_IDENT_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def parse_size_ceiling(raw: Any) -> Optional[int]:
    """Parse a ceiling value; None, "", 0 and "none"/"off" all disable the check."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"invalid size ceiling: {raw!r}")
    if isinstance(raw, int):
        n = raw
    else:
        s = str(raw).strip().lower()
        if s in {"", "none", "off", "unlimited"}:
            return None
        try:
            n = int(s)
        except ValueError:
            raise ValueError(f"invalid size ceiling: {raw!r}") from None
    if n < 0:
        raise ValueError(f"size ceiling must be >= 0, got {n}")
    return n or None


@dataclass(frozen=True)
class AssemblyConfig:
    """Immutable per-run configuration, threaded explicitly through the assembler."""

    size_ceiling_bytes: Optional[int] = DEFAULT_SIZE_CEILING_BYTES
    search_paths: Tuple[Path, ...] = field(default=())
    strict_slots: bool = True
    data_variable_name: str = DEFAULT_DATA_VARIABLE
    data_slot_name: str = DEFAULT_DATA_SLOT
    oversize_warn_only: bool = False
    minified: str = "auto"
    sort_keys: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "size_ceiling_bytes", parse_size_ceiling(self.size_ceiling_bytes))
        object.__setattr__(self, "search_paths", tuple(Path(p) for p in self.search_paths))
        if not _JS_IDENT_RE.match(self.data_variable_name or ""):
            raise ValueError(f"data_variable_name must be a JavaScript identifier, got {self.data_variable_name!r}")
        if not (self.data_slot_name or "").strip():
            raise ValueError("data_slot_name must be non-empty")
        if self.minified not in MINIFIED_MODES:
            raise ValueError(f"minified must be one of {', '.join(MINIFIED_MODES)}; got {self.minified!r}")

    @property
    def budget_enabled(self) -> bool:
        return self.size_ceiling_bytes is not None

    def with_changes(self, **changes: Any) -> "AssemblyConfig":
        return replace(self, **changes)


__all__ = [
    "AssemblyConfig",
    "DEFAULT_DATA_SLOT",
    "DEFAULT_DATA_VARIABLE",
    "DEFAULT_SIZE_CEILING_BYTES",
    "MINIFIED_MODES",
    "parse_size_ceiling",
]
