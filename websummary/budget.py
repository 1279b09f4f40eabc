# websummary/budget.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .errors import SizeBudgetExceeded
from .util.console import eprint


def measure(text: str) -> int:
    return len(text.encode("utf-8"))


def format_bytes(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    size = float(n)
    for unit in ("KiB", "MiB", "GiB"):
        size /= 1024.0
        if size < 1024 or unit == "GiB":
            return f"{size:.1f} {unit}"
    return f"{n} B"


@dataclass(frozen=True)
class BudgetCheck:
    size: int
    ceiling: Optional[int]

    @property
    def enabled(self) -> bool:
        return bool(self.ceiling)

    @property
    def ok(self) -> bool:
        return not self.enabled or self.size <= int(self.ceiling or 0)

    @property
    def headroom(self) -> Optional[int]:
        if not self.enabled:
            return None
        return int(self.ceiling or 0) - self.size


def check_size_budget(size: int, ceiling: Optional[int]) -> BudgetCheck:
    """Pass/fail for `size` against `ceiling`; None or 0 disables, the boundary is inclusive."""
    if size < 0:
        raise ValueError(f"size must be >= 0, got {size}")
    if ceiling is not None and ceiling < 0:
        raise ValueError(f"ceiling must be >= 0, got {ceiling}")
    return BudgetCheck(size=size, ceiling=ceiling or None)


def largest(breakdown: Iterable[Tuple[str, int]], n: int = 3) -> Tuple[Tuple[str, int], ...]:
    return tuple(sorted(breakdown, key=lambda kv: (-kv[1], kv[0]))[:n])


def enforce_size_budget(
    size: int,
    ceiling: Optional[int],
    *,
    warn_only: bool = False,
    breakdown: Iterable[Tuple[str, int]] = (),
) -> BudgetCheck:
    check = check_size_budget(size, ceiling)
    if check.ok:
        return check
    err = SizeBudgetExceeded(size, int(ceiling or 0), largest(breakdown))
    if not warn_only:
        raise err
    eprint(f"[websummary.budget] WARN: {err}")
    return check


__all__ = [
    "BudgetCheck",
    "check_size_budget",
    "enforce_size_budget",
    "format_bytes",
    "largest",
    "measure",
]
