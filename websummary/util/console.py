# websummary/util/console.py
from __future__ import annotations
import os
import sys
from typing import Any

_OBS_ENV = "WEBSUMMARY_OBS_LOG"


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def obs_enabled() -> bool:
    v = (os.getenv(_OBS_ENV, "") or "").strip().lower()
    return v in {"1", "true", "yes", "on"}
