# websummary/checks.py
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from .html_extract import HtmlDataExtractError, extract_data_from_html_text


class DocumentCheckError(RuntimeError):
    """Raised when an assembled document violates an output invariant."""


_MARKER_RE = re.compile(r"<!--SLOT:[^>]*-->")
_SCRIPT_OPEN_RE = re.compile(r"<script(?=[\s/>])[^>]*>", re.IGNORECASE)
_SCRIPT_CLOSE_RE = re.compile(r"</script(?=[\s/>])[^>]*>?", re.IGNORECASE)
# Tokens that move the HTML tokenizer between the script data, escaped and
# double-escaped states.
_SCRIPT_BODY_RE = re.compile(r"<!--|-->|<(?P<close>/)?script(?=[\s/>])", re.IGNORECASE)
_REF_RE = re.compile(r"""\b(?:src|href)\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s>]+))""", re.IGNORECASE)


def _script_end(html: str, pos: int) -> Optional[int]:
    """Offset just past the tag that really closes the script opened before `pos`."""
    state = "data"
    for m in _SCRIPT_BODY_RE.finditer(html, pos):
        tok = m.group(0)
        if tok == "<!--":
            if state == "data":
                state = "escaped"
        elif tok == "-->":
            state = "data"
        elif m.group("close"):
            if state == "double":
                state = "escaped"
            else:
                gt = html.find(">", m.end())
                return len(html) if gt < 0 else gt + 1
        elif state == "escaped":
            state = "double"
    return None


def _script_problems(html: str) -> List[str]:
    problems: List[str] = []
    pos = 0
    while True:
        o = _SCRIPT_OPEN_RE.search(html, pos)
        c = _SCRIPT_CLOSE_RE.search(html, pos)
        if c is not None and (o is None or c.start() < o.start()):
            problems.append(f"stray </script> at offset {c.start()} (a script block was closed early)")
            pos = c.end()
            continue
        if o is None:
            return problems
        end = _script_end(html, o.end())
        if end is None:
            problems.append(f"unterminated <script> at offset {o.start()} (it swallows the rest of the document)")
            return problems
        pos = end


def external_refs(html: str, resolved_names: Iterable[str]) -> List[Tuple[str, int]]:
    """(name, offset) for every src=/href= that points at a resource that was inlined."""
    names = {n for n in resolved_names if n}
    if not names:
        return []
    refs: List[Tuple[str, int]] = []
    for m in _REF_RE.finditer(html):
        ref = (m.group("dq") or m.group("sq") or m.group("bare") or "").strip()
        if ref.startswith("./"):
            ref = ref[2:]
        if ref in names:
            refs.append((ref, m.start()))
    return refs


def _ref_problems(html: str, resolved_names: Iterable[str]) -> List[str]:
    return [
        f"external reference to inlined resource {name!r} at offset {offset}"
        for name, offset in external_refs(html, resolved_names)
    ]


def basic_html_checks(
    html: str,
    *,
    resolved_names: Iterable[str] = (),
    data_variable_name: Optional[str] = None,
    strict: bool = False,
) -> List[str]:
    """Return a list of invariant violations (empty when the document is fine)."""
    problems: List[str] = []

    m = _MARKER_RE.search(html)
    if m:
        problems.append(f"template marker {m.group(0)!r} still present at offset {m.start()}")

    problems.extend(_script_problems(html))
    problems.extend(_ref_problems(html, resolved_names))

    if data_variable_name:
        try:
            extract_data_from_html_text(html, variable_name=data_variable_name)
        except HtmlDataExtractError as e:
            problems.append(str(e))

    if strict:
        head = html[:512].lower()
        if not head.lstrip().startswith("<!doctype html>"):
            problems.append("document does not start with <!doctype html>")
        if 'charset="utf-8"' not in head and "charset=utf-8" not in head:
            problems.append("missing <meta charset=\"utf-8\"> near the top of the document")

    return problems


def assert_document_ok(html: str, **kwargs) -> None:
    problems = basic_html_checks(html, **kwargs)
    if problems:
        raise DocumentCheckError(problems[0])


__all__ = ["DocumentCheckError", "assert_document_ok", "basic_html_checks", "external_refs"]
