#!/usr/bin/env python3
"""
websummary smoke build

Goals:
  - Assemble a minimal web summary with websummary.assemble() using the
    bundled shell and synthetic in-memory assets (no build toolchain needed).
  - Run basic invariants so refactors fail fast (avoid blank page surprises).

Usage:
  PYTHONPATH=/path/to/repo python -m websummary.tools.smoke_build --out build/websummary_smoke.html
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from websummary.assemble import assemble, write_document
from websummary.checks import basic_html_checks
from websummary.config import AssemblyConfig
from websummary.errors import AssemblyError
from websummary.resolve import MappingSource
from websummary.shell import DEFAULT_SHELL, SCRIPT_RESOURCE, STYLES_RESOURCE, SUMMARY_RESOURCE

SMOKE_TITLE = "SMOKE: Sample summary"

_SMOKE_JS = "(function(){var d=window.data||{};document.title=d.sample&&d.sample.name||document.title;})();"
_SMOKE_CSS = "body{font-family:sans-serif;margin:0}.summary-card{padding:8px}"
_SMOKE_FRAGMENT = """<div class="summary-card" data-key="metrics"></div>
[[ include smoke_footer.html ]]"""
_SMOKE_FOOTER = '<footer class="summary-footer">generated by websummary smoke build</footer>'


def _die(msg: str, rc: int = 2) -> int:
    print(f"[websummary-smoke-build] ERROR: {msg}", file=sys.stderr)
    return rc


def _synthetic_payload() -> Dict[str, Any]:
    """A tiny payload that exercises nesting, unicode and script-breaking text."""
    return {
        "sample": {"name": SMOKE_TITLE, "id": "smoke-001"},
        "metrics": [
            {"key": "reads", "value": 1250000, "format": "integer"},
            {"key": "fraction", "value": 0.8125, "format": "percent"},
        ],
        "alarms": {"alarms": []},
        "notes": "contains </script><!-- and --> on purpose; é ok",
    }


def _smoke_source() -> MappingSource:
    return MappingSource(
        {
            SCRIPT_RESOURCE: _SMOKE_JS,
            STYLES_RESOURCE: _SMOKE_CSS,
            SUMMARY_RESOURCE: _SMOKE_FRAGMENT,
            "smoke_footer.html": _SMOKE_FOOTER,
        }
    )


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="websummary-smoke-build", description="Build a synthetic web summary and check it.")
    ap.add_argument("--out", required=True, help="Output HTML path")
    ap.add_argument("--out-json", default=None, help="Also write the synthetic payload JSON here")
    ap.add_argument("--strict", action="store_true", help="Enable strict HTML checks")
    ns = ap.parse_args(argv)

    payload = _synthetic_payload()
    cfg = AssemblyConfig()
    try:
        doc = assemble(DEFAULT_SHELL, data=payload, source=_smoke_source(), config=cfg)
    except AssemblyError as e:
        return _die(f"assembly failed: {e}")

    problems = basic_html_checks(
        doc.html,
        resolved_names=doc.slots,
        data_variable_name=cfg.data_variable_name,
        strict=bool(ns.strict),
    )
    if "summary-footer" not in doc.html:
        problems.append("include directive was not expanded")
    if problems:
        for p in problems:
            print(f"[websummary-smoke-build] FAIL: {p}", file=sys.stderr)
        return _die(f"{len(problems)} invariant(s) failed", rc=4)

    out = write_document(doc, ns.out)
    if ns.out_json:
        pj = Path(ns.out_json)
        pj.parent.mkdir(parents=True, exist_ok=True)
        pj.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))

    print(f"[websummary-smoke-build] OK: {out} ({doc.size_bytes} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
