# websummary/embed.py
from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Union

import orjson

from .errors import ResourceReadError, SerializationError
from .slots import SlotKind, render_slot

# orjson refuses deeper documents; report it as a path instead of a bare encoder error.
MAX_DEPTH = 254

# Characters that could end the enclosing <script>, open/close an HTML comment
# or break older JS parsers. They only ever occur inside JSON strings, so the
# \uXXXX form decodes to the same value.
_HTML_UNSAFE = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_HTML_UNSAFE_TABLE = str.maketrans(_HTML_UNSAFE)


def _check_tree(value: Any, path: str, depth: int) -> None:
    if depth > MAX_DEPTH:
        raise SerializationError(path, f"nesting deeper than {MAX_DEPTH} levels")
    if value is None or isinstance(value, (bool, str)):
        return
    if isinstance(value, int):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SerializationError(path, f"non-finite number {value!r} is not representable in JSON")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise SerializationError(path, f"object key {k!r} is {type(k).__name__}, not str")
            _check_tree(v, f"{path}.{k}", depth + 1)
        return
    if isinstance(value, (list, tuple)):
        for i, v in enumerate(value):
            _check_tree(v, f"{path}[{i}]", depth + 1)
        return
    raise SerializationError(path, f"unsupported type {type(value).__name__}")


def serialize_payload(value: Any, *, sort_keys: bool = False) -> str:
    """Serialize a JSON tree to compact, script-safe JSON text.

    Non-finite floats, non-string keys and non-JSON types raise
    SerializationError rather than being coerced.
    """
    _check_tree(value, "$", 0)
    opts = orjson.OPT_SORT_KEYS if sort_keys else 0
    try:
        raw = orjson.dumps(value, option=opts)
    except orjson.JSONEncodeError as e:
        raise SerializationError("$", str(e)) from e
    return raw.decode("utf-8").translate(_HTML_UNSAFE_TABLE)


def data_assignment(value: Any, variable_name: str, *, sort_keys: bool = False) -> str:
    return f"window.{variable_name} = {serialize_payload(value, sort_keys=sort_keys)};"


def embed_data(value: Any, variable_name: str, *, sort_keys: bool = False) -> str:
    """`<script>window.NAME = <json>;</script>` for the given payload."""
    return render_slot(SlotKind.INLINE_DATA, data_assignment(value, variable_name, sort_keys=sort_keys))


def parse_payload(raw: Union[bytes, str], *, label: str = "payload") -> Any:
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise SerializationError(label, f"invalid JSON: {e}") from e


def load_payload(path: Union[str, Path]) -> Any:
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise ResourceReadError(p.name, str(p), e.strerror or str(e)) from e
    return parse_payload(raw, label=str(p))


__all__ = [
    "MAX_DEPTH",
    "data_assignment",
    "embed_data",
    "load_payload",
    "parse_payload",
    "serialize_payload",
]
