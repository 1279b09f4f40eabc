# websummary/slots.py
#
# Slot markers look like <!--SLOT:NAME--> or <!--SLOT:NAME:KIND-->.
# Substitution walks the original skeleton once; inserted content is never
# scanned again, so content that happens to contain a marker stays literal.
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .errors import DuplicateSlot, SlotError, UnresolvedSlot
from .util.console import eprint, obs_enabled


class SlotKind(str, Enum):
    INLINE_SCRIPT = "script"
    INLINE_STYLE = "style"
    INLINE_DATA = "data"
    RAW_HTML = "html"
    INLINE_IMAGE = "image"


_SLOT_RE = re.compile(r"<!--SLOT:(?P<name>[A-Za-z0-9_.\-]+)(?::(?P<kind>[a-z]+))?-->")
_SLOT_PREFIX = "<!--SLOT:"

# "</script", "<script" and "<!--" drive the HTML script-data states; "<\" keeps
# them inert for the parser and means the same thing inside JS strings and regexes.
_SCRIPT_UNSAFE_RE = re.compile(r"<(?=/script|script|!--)", re.IGNORECASE)
_STYLE_CLOSE_RE = re.compile(r"</(style)", re.IGNORECASE)

_EXT_KINDS = {
    ".js": SlotKind.INLINE_SCRIPT,
    ".css": SlotKind.INLINE_STYLE,
    ".html": SlotKind.RAW_HTML,
    ".htm": SlotKind.RAW_HTML,
    ".png": SlotKind.INLINE_IMAGE,
    ".jpg": SlotKind.INLINE_IMAGE,
    ".jpeg": SlotKind.INLINE_IMAGE,
    ".gif": SlotKind.INLINE_IMAGE,
    ".svg": SlotKind.INLINE_IMAGE,
}


@dataclass(frozen=True)
class Slot:
    name: str
    kind: Optional[SlotKind]
    start: int
    end: int


@dataclass(frozen=True)
class SlotContent:
    kind: SlotKind
    text: str


def guess_kind(name: str) -> Optional[SlotKind]:
    dot = name.rfind(".")
    if dot < 0:
        return None
    return _EXT_KINDS.get(name[dot:].lower())


def scan_slots(skeleton: str) -> List[Slot]:
    """Return every slot marker in document order."""
    slots: List[Slot] = []
    for m in _SLOT_RE.finditer(skeleton):
        kind_raw = m.group("kind")
        kind: Optional[SlotKind] = None
        if kind_raw is not None:
            try:
                kind = SlotKind(kind_raw)
            except ValueError:
                raise SlotError(f"slot {m.group('name')!r} has unknown kind {kind_raw!r}") from None
        slots.append(Slot(m.group("name"), kind, m.start(), m.end()))

    n_prefix = skeleton.count(_SLOT_PREFIX)
    if n_prefix != len(slots):
        pos = 0
        for s in slots:
            if skeleton.find(_SLOT_PREFIX, pos) != s.start:
                break
            pos = s.end
        at = skeleton.find(_SLOT_PREFIX, pos)
        snippet = skeleton[at:at + 40].split("\n", 1)[0]
        raise SlotError(f"malformed slot marker at offset {at}: {snippet!r}")
    return slots


def _check_no_overlap(slots: List[Slot]) -> None:
    prev: Optional[Slot] = None
    for s in sorted(slots, key=lambda x: x.start):
        if prev is not None and s.start < prev.end:
            raise SlotError(f"slots {prev.name!r} and {s.name!r} overlap")
        prev = s


def render_slot(kind: SlotKind, content: str) -> str:
    """Serialize already-prepared content for its slot kind."""
    if kind is SlotKind.INLINE_SCRIPT or kind is SlotKind.INLINE_DATA:
        return "<script>" + _SCRIPT_UNSAFE_RE.sub(r"<\\", content) + "</script>"
    if kind is SlotKind.INLINE_STYLE:
        return "<style>" + _STYLE_CLOSE_RE.sub(r"<\\/\1", content) + "</style>"
    if kind is SlotKind.RAW_HTML:
        return content
    if kind is SlotKind.INLINE_IMAGE:
        return content
    raise SlotError(f"no renderer for slot kind {kind!r}")


def inline_slots(skeleton: str, contents: Mapping[str, SlotContent], *, strict: bool = True) -> str:
    """Replace every slot marker in `skeleton` with its rendered content.

    Raises UnresolvedSlot / DuplicateSlot in strict mode. With strict=False an
    unresolved marker is dropped and duplicated names all get the same content;
    both cases are reported as WARN lines.
    """
    slots = scan_slots(skeleton)
    _check_no_overlap(slots)

    counts: Dict[str, int] = {}
    for s in slots:
        counts[s.name] = counts.get(s.name, 0) + 1
    for name, n in counts.items():
        if n > 1:
            if strict:
                raise DuplicateSlot(name, n)
            eprint(f"[websummary.slots] WARN: slot {name!r} declared {n} times; filling every occurrence")

    rendered: Dict[str, str] = {}
    out: List[str] = []
    pos = 0
    for s in slots:
        out.append(skeleton[pos:s.start])
        pos = s.end
        item = contents.get(s.name)
        if item is None:
            if strict:
                raise UnresolvedSlot(s.name)
            eprint(f"[websummary.slots] WARN: unresolved slot {s.name!r} removed")
            continue
        if s.kind is not None and s.kind is not item.kind:
            raise SlotError(f"slot {s.name!r} is declared as {s.kind.value!r} but content is {item.kind.value!r}")
        if s.name not in rendered:
            rendered[s.name] = render_slot(item.kind, item.text)
        out.append(rendered[s.name])
    out.append(skeleton[pos:])

    if obs_enabled():
        unused = sorted(set(contents) - set(counts))
        if unused:
            eprint(f"[websummary.slots] unused content names={unused}")

    return "".join(out)


__all__ = [
    "Slot",
    "SlotContent",
    "SlotKind",
    "guess_kind",
    "inline_slots",
    "render_slot",
    "scan_slots",
]
