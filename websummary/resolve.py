"""Resource resolution.

A `ComponentSource` is anything with `resolve(name) -> bytes`. The assembler
only talks to that capability, so the compiled component bundle can come from
disk, from memory, or from a test double.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

from .errors import ResourceNotFound, ResourceReadError
from .util.console import eprint, obs_enabled


class ComponentSource(Protocol):
    def resolve(self, name: str) -> bytes:
        ...


def _safe_parts(name: str) -> Optional[Tuple[str, ...]]:
    # Logical names are relative, "/"-separated and may not climb out of a root.
    if not name or "\\" in name or name.startswith("/"):
        return None
    parts = PurePosixPath(name).parts
    if not parts or any(p in ("..", "") for p in parts):
        return None
    return tuple(p for p in parts if p != ".")


class SearchPathSource:
    """Resolve names against an ordered list of base directories; first hit wins."""

    def __init__(self, roots: Iterable[Union[str, Path]]) -> None:
        self.roots: Tuple[Path, ...] = tuple(Path(r) for r in roots)
        self._cache: Dict[str, bytes] = {}

    def locate(self, name: str) -> Optional[Path]:
        parts = _safe_parts(name)
        if parts is None:
            return None
        for root in self.roots:
            p = root.joinpath(*parts)
            if p.is_file():
                return p
        return None

    def resolve(self, name: str) -> bytes:
        if name in self._cache:
            return self._cache[name]
        path = self.locate(name)
        if path is None:
            raise ResourceNotFound(name, tuple(str(r) for r in self.roots))
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ResourceReadError(name, str(path), e.strerror or str(e)) from e
        if obs_enabled():
            eprint(f"[websummary.resolve] read name={name!r} path={path} bytes={len(raw)}")
        self._cache[name] = raw
        return raw


class MappingSource:
    """In-memory resources; str values are stored as UTF-8."""

    def __init__(self, resources: Mapping[str, Union[bytes, str]]) -> None:
        self._resources: Dict[str, bytes] = {
            k: (v.encode("utf-8") if isinstance(v, str) else bytes(v)) for k, v in resources.items()
        }

    def resolve(self, name: str) -> bytes:
        try:
            return self._resources[name]
        except KeyError:
            raise ResourceNotFound(name, ("<memory>",)) from None


class ChainSource:
    """Try each source in turn; the first one that knows the name wins."""

    def __init__(self, *sources: ComponentSource) -> None:
        self.sources = tuple(sources)

    def resolve(self, name: str) -> bytes:
        searched: List[str] = []
        for src in self.sources:
            try:
                return src.resolve(name)
            except ResourceNotFound as e:
                searched.extend(e.searched)
        raise ResourceNotFound(name, tuple(searched))


def minified_variant(name: str) -> Optional[str]:
    """`app.js` -> `app.min.js`; None when the name has no extension or is already minified."""
    head, sep, leaf = name.rpartition("/")
    stem, ext = os.path.splitext(leaf)
    if not stem or not ext or stem.endswith(".min"):
        return None
    return f"{head}{sep}{stem}.min{ext}"


def decode_text(name: str, raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResourceReadError(name, "", f"not valid UTF-8 ({e.reason} at byte {e.start})") from e


__all__ = [
    "ChainSource",
    "ComponentSource",
    "MappingSource",
    "SearchPathSource",
    "decode_text",
    "minified_variant",
]
