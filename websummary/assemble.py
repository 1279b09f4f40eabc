"""Document assembly.

Fixed order, all-or-nothing:
  1. scan the skeleton for slots
  2. resolve each resource slot through the ComponentSource
  3. embed the data payload
  4. substitute every slot in one pass
  5. enforce the size budget on the finished document

Nothing is written and nothing partial is returned when any stage fails.
"""

from __future__ import annotations

import base64
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .budget import BudgetCheck, enforce_size_budget, format_bytes, measure
from .checks import external_refs
from .config import AssemblyConfig
from .embed import data_assignment
from .errors import DuplicateSlot, ResourceNotFound, SlotError, UnresolvedSlot
from .includes import expand_includes
from .resolve import ComponentSource, decode_text, minified_variant
from .slots import Slot, SlotContent, SlotKind, guess_kind, inline_slots, scan_slots
from .util.console import eprint, obs_enabled


class _NoData:
    def __repr__(self) -> str:
        return "NO_DATA"


# None is a valid JSON payload, so "no payload" needs its own sentinel.
NO_DATA: Any = _NoData()

_IMAGE_MIME = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}

_MINIFIABLE = (SlotKind.INLINE_SCRIPT, SlotKind.INLINE_STYLE)


@dataclass(frozen=True)
class AssembledDocument:
    html: str
    size_bytes: int
    slots: Tuple[str, ...]
    budget: BudgetCheck
    minified: bool = False

    @property
    def content(self) -> bytes:
        return self.html.encode("utf-8")


def _slot_kind(slot: Slot, kinds: Mapping[str, SlotKind], config: AssemblyConfig) -> SlotKind:
    kind = slot.kind
    if kind is None and slot.name in kinds:
        kind = SlotKind(kinds[slot.name])
    if kind is None and slot.name == config.data_slot_name:
        kind = SlotKind.INLINE_DATA
    if kind is None:
        kind = guess_kind(slot.name)
    if kind is None:
        raise UnresolvedSlot(slot.name, "no kind in marker, declaration or file extension")
    if kind is SlotKind.INLINE_IMAGE:
        _image_mime(slot.name)
    return kind


def _image_mime(name: str) -> str:
    ext = os.path.splitext(name)[1].lower()
    mime = _IMAGE_MIME.get(ext)
    if mime is None:
        raise SlotError(f"image slot {name!r} has unknown extension {ext or '(none)'!r}; expected one of {', '.join(sorted(_IMAGE_MIME))}")
    return mime


def image_data_uri(name: str, raw: bytes) -> str:
    mime = _image_mime(name)
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def _resolve_asset(source: ComponentSource, name: str, kind: SlotKind, use_minified: bool) -> Tuple[bytes, str, bool]:
    if use_minified and kind in _MINIFIABLE:
        variant = minified_variant(name)
        if variant is not None:
            try:
                return source.resolve(variant), variant, True
            except ResourceNotFound:
                pass
    return source.resolve(name), name, False


def _slot_text(
    slot: Slot,
    kind: SlotKind,
    *,
    data: Any,
    source: Optional[ComponentSource],
    config: AssemblyConfig,
    use_minified: bool,
) -> Tuple[str, bool]:
    if kind is SlotKind.INLINE_DATA:
        if slot.name != config.data_slot_name:
            raise UnresolvedSlot(slot.name, f"only the {config.data_slot_name!r} slot receives the data payload")
        if data is NO_DATA:
            raise UnresolvedSlot(slot.name, "no data payload supplied")
        return data_assignment(data, config.data_variable_name, sort_keys=config.sort_keys), False

    if source is None:
        raise UnresolvedSlot(slot.name, "no component source configured")
    raw, used, swapped = _resolve_asset(source, slot.name, kind, use_minified)
    if kind is SlotKind.INLINE_IMAGE:
        return image_data_uri(used, raw), swapped
    text = decode_text(used, raw)
    if kind is SlotKind.RAW_HTML:
        text = expand_includes(text, source, label=used)
    return text, swapped


def _build_contents(
    slots: List[Slot],
    *,
    data: Any,
    source: Optional[ComponentSource],
    kinds: Mapping[str, SlotKind],
    config: AssemblyConfig,
    use_minified: bool,
) -> Tuple[Dict[str, SlotContent], bool]:
    contents: Dict[str, SlotContent] = {}
    any_swapped = False
    for slot in slots:
        if slot.name in contents:
            continue
        try:
            kind = _slot_kind(slot, kinds, config)
            text, swapped = _slot_text(slot, kind, data=data, source=source, config=config, use_minified=use_minified)
        except UnresolvedSlot as e:
            if config.strict_slots:
                raise
            eprint(f"[websummary.assemble] WARN: {e}")
            continue
        any_swapped = any_swapped or swapped
        contents[slot.name] = SlotContent(kind, text)
    return contents, any_swapped


def _render(
    skeleton: str,
    slots: List[Slot],
    *,
    data: Any,
    source: Optional[ComponentSource],
    kinds: Mapping[str, SlotKind],
    config: AssemblyConfig,
    use_minified: bool,
) -> Tuple[str, Dict[str, SlotContent], bool]:
    contents, swapped = _build_contents(
        slots, data=data, source=source, kinds=kinds, config=config, use_minified=use_minified
    )
    html = inline_slots(skeleton, contents, strict=config.strict_slots)
    refs = external_refs(html, [n for n, c in contents.items() if c.kind is not SlotKind.INLINE_DATA])
    if refs:
        name, offset = refs[0]
        raise SlotError(f"resource {name!r} is inlined but still referenced by src/href at offset {offset}")
    return html, contents, swapped


def assemble(
    skeleton: str,
    *,
    data: Any = NO_DATA,
    source: Optional[ComponentSource] = None,
    kinds: Optional[Mapping[str, SlotKind]] = None,
    config: Optional[AssemblyConfig] = None,
) -> AssembledDocument:
    """Assemble `skeleton` into one self-contained HTML document.

    `data` fills the configured data slot; every other slot is resolved by
    name through `source`. `kinds` declares slot kinds for names whose marker
    and extension do not say.
    """
    cfg = config or AssemblyConfig()
    kinds = dict(kinds or {})
    t0 = time.monotonic()

    slots = scan_slots(skeleton)
    if cfg.strict_slots:
        seen: Dict[str, int] = {}
        for s in slots:
            seen[s.name] = seen.get(s.name, 0) + 1
        for name, n in seen.items():
            if n > 1:
                raise DuplicateSlot(name, n)

    render_kw = dict(data=data, source=source, kinds=kinds, config=cfg)
    html, contents, used_min = _render(skeleton, slots, use_minified=cfg.minified == "always", **render_kw)
    size = measure(html)

    if cfg.minified == "auto" and cfg.budget_enabled and size > int(cfg.size_ceiling_bytes or 0):
        html2, contents2, swapped = _render(skeleton, slots, use_minified=True, **render_kw)
        if swapped:
            if obs_enabled():
                eprint(f"[websummary.assemble] retry.minified bytes={size} -> {measure(html2)}")
            html, contents, used_min = html2, contents2, True
            size = measure(html)

    breakdown = [(name, measure(c.text)) for name, c in contents.items()]
    check = enforce_size_budget(
        size, cfg.size_ceiling_bytes, warn_only=cfg.oversize_warn_only, breakdown=breakdown
    )

    if obs_enabled():
        elapsed_ms = int((time.monotonic() - t0) * 1000)
        eprint(
            f"[websummary.assemble] assemble.ok ms={elapsed_ms} slots={len(contents)} "
            f"bytes={size} ({format_bytes(size)}) minified={used_min}"
        )

    return AssembledDocument(
        html=html,
        size_bytes=size,
        slots=tuple(contents),
        budget=check,
        minified=used_min,
    )


def write_document(doc: AssembledDocument, out_path: Union[str, Path]) -> Path:
    """Write atomically: the target either keeps its old state or gets the full document."""
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{out.name}.", suffix=".tmp", dir=str(out.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(doc.content)
        os.replace(tmp, out)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    return out


def assemble_file(out_path: Union[str, Path], skeleton: str, **kwargs: Any) -> Tuple[AssembledDocument, Path]:
    doc = assemble(skeleton, **kwargs)
    return doc, write_document(doc, out_path)


__all__ = [
    "AssembledDocument",
    "NO_DATA",
    "assemble",
    "assemble_file",
    "image_data_uri",
    "write_document",
]
