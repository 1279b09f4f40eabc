# websummary/shell.py
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .errors import ResourceNotFound, ResourceReadError
from .resolve import ComponentSource, decode_text

SHELL_RESOURCE = "template.html"
SCRIPT_RESOURCE = "websummary.js"
STYLES_RESOURCE = "websummary.css"
SUMMARY_RESOURCE = "summary.html"

# Legacy-safe shell: plain tags only, no module scripts, no template literals.
DEFAULT_SHELL = r"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta http-equiv="X-UA-Compatible" content="IE=edge" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>Web Summary</title>
<!--SLOT:websummary.css:style-->
</head>
<body>
<div id="root">
<!--SLOT:summary.html:html-->
</div>
<!--SLOT:data:data-->
<!--SLOT:websummary.js:script-->
</body>
</html>
"""


def load_shell(path: Optional[Union[str, Path]] = None, source: Optional[ComponentSource] = None) -> str:
    """Explicit path, else `template.html` from the source, else the bundled shell."""
    if path is not None:
        p = Path(path)
        try:
            raw = p.read_bytes()
        except FileNotFoundError:
            raise ResourceNotFound(p.name, (str(p.parent),)) from None
        except OSError as e:
            raise ResourceReadError(p.name, str(p), e.strerror or str(e)) from e
        return decode_text(p.name, raw)
    if source is not None:
        try:
            return decode_text(SHELL_RESOURCE, source.resolve(SHELL_RESOURCE))
        except ResourceNotFound:
            pass
    return DEFAULT_SHELL


__all__ = [
    "DEFAULT_SHELL",
    "SCRIPT_RESOURCE",
    "SHELL_RESOURCE",
    "STYLES_RESOURCE",
    "SUMMARY_RESOURCE",
    "load_shell",
]
