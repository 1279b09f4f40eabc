from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from .assemble import assemble, write_document
from .config import DEFAULT_SIZE_CEILING_BYTES, MINIFIED_MODES, AssemblyConfig, parse_size_ceiling
from .embed import load_payload
from .errors import AssemblyError, SizeBudgetExceeded
from .resolve import ChainSource, ComponentSource, MappingSource, SearchPathSource
from .shell import SUMMARY_RESOURCE, load_shell


def _die(msg: str, rc: int = 2) -> int:
    print(f"[websummary] ERROR: {msg}", file=sys.stderr)
    return rc


def _env_search_paths() -> List[str]:
    raw = (os.getenv("WEBSUMMARY_SEARCH_PATH", "") or "").strip()
    return [p for p in raw.split(os.pathsep) if p.strip()]


def _env_size_ceiling() -> str:
    return (os.getenv("WEBSUMMARY_SIZE_CEILING", "") or "").strip() or str(DEFAULT_SIZE_CEILING_BYTES)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="websummary",
        description="Assemble a self-contained HTML web summary from a JSON payload, a layout fragment and component assets.",
    )
    ap.add_argument("--data", required=True, help="JSON data payload path")
    ap.add_argument("--template", default=None, help="Layout fragment (HTML) that fills the summary.html slot")
    ap.add_argument("--shell", default=None,
                    help="Skeleton HTML with slot markers (default: template.html on the search path, else the bundled shell)")
    ap.add_argument("--out-dir", default="build", help="Output directory (default: ./build)")
    ap.add_argument("--out-name", default="websummary.html", help="Output file name (default: websummary.html)")
    ap.add_argument(
        "--search-path",
        action="append",
        default=None,
        help="Resource directory; repeat to add more, searched in order (default: env WEBSUMMARY_SEARCH_PATH)",
    )
    ap.add_argument(
        "--size-ceiling",
        default=_env_size_ceiling(),
        help="Maximum output size in bytes; 0 disables (default: env WEBSUMMARY_SIZE_CEILING or 10 MiB)",
    )
    ap.add_argument("--warn-oversize", action="store_true", help="Warn instead of failing when the ceiling is exceeded")
    ap.add_argument("--lenient-slots", action="store_true", help="Warn instead of failing on unresolved/duplicate slots")
    ap.add_argument("--data-var", default="data", help="Global the payload is assigned to (default: data)")
    ap.add_argument("--minified", choices=MINIFIED_MODES, default="auto",
                    help="Use *.min.* script/style variants: auto (only when over budget), always, never")
    ap.add_argument("--sort-keys", action="store_true", help="Sort object keys in the embedded payload")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)

    search_paths = list(ns.search_path) if ns.search_path else _env_search_paths()

    fragment: Optional[bytes] = None
    extra_roots: List[str] = []
    try:
        if ns.template:
            tpl = Path(ns.template)
            fragment = SearchPathSource([tpl.parent]).resolve(tpl.name)
            extra_roots.append(str(tpl.parent))

        cfg = AssemblyConfig(
            size_ceiling_bytes=parse_size_ceiling(ns.size_ceiling),
            search_paths=tuple(Path(p) for p in search_paths + extra_roots),
            strict_slots=not ns.lenient_slots,
            data_variable_name=ns.data_var,
            oversize_warn_only=bool(ns.warn_oversize),
            minified=ns.minified,
            sort_keys=bool(ns.sort_keys),
        )
    except AssemblyError as e:
        return _die(str(e))
    except ValueError as e:
        return _die(f"invalid configuration: {e}")

    assets = SearchPathSource(cfg.search_paths)
    source: ComponentSource = assets
    if fragment is not None:
        source = ChainSource(MappingSource({SUMMARY_RESOURCE: fragment}), assets)

    try:
        data = load_payload(ns.data)
        skeleton = load_shell(ns.shell, source=SearchPathSource(search_paths))
        doc = assemble(skeleton, data=data, source=source, config=cfg)
    except SizeBudgetExceeded as e:
        return _die(str(e), rc=3)
    except AssemblyError as e:
        return _die(str(e))

    out = Path(ns.out_dir).expanduser() / ns.out_name
    try:
        write_document(doc, out)
    except OSError as e:
        return _die(f"cannot write {out}: {e}")

    print(str(out))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
