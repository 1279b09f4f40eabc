# websummary/includes.py
#
# Layout fragments can pull in other fragments with `[[ include NAME ]]`.
# Included text may itself contain directives; expansion repeats until the
# fragment is stable or the round limit trips.
from __future__ import annotations

import re
from typing import Dict

from .errors import IncludeDepthExceeded
from .resolve import ComponentSource, decode_text

INCLUDE_RE = re.compile(r"\[\[ include (?P<name>[A-Za-z0-9./_\-]+) \]\]")
MAX_INCLUDE_ROUNDS = 100


def expand_includes(text: str, source: ComponentSource, *, label: str = "<fragment>", max_rounds: int = MAX_INCLUDE_ROUNDS) -> str:
    loaded: Dict[str, str] = {}

    def _load(m: "re.Match[str]") -> str:
        name = m.group("name")
        if name not in loaded:
            loaded[name] = decode_text(name, source.resolve(name))
        return loaded[name]

    rounds = 0
    while INCLUDE_RE.search(text):
        if rounds >= max_rounds:
            raise IncludeDepthExceeded(label, max_rounds)
        rounds += 1
        text = INCLUDE_RE.sub(_load, text)
    return text


__all__ = ["INCLUDE_RE", "MAX_INCLUDE_ROUNDS", "expand_includes"]
