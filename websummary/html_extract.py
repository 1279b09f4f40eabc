# Public helper API: read the embedded data payload back out of an assembled report
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import orjson

from .config import DEFAULT_DATA_VARIABLE


@dataclass
class HtmlDataExtractError(RuntimeError):
    message: str
    def __str__(self) -> str:
        return self.message


def _assignment_re(variable_name: str) -> "re.Pattern[str]":
    # The embedder escapes every "<" in the payload, so the first ";</script>"
    # after the assignment is the end of the data block.
    return re.compile(
        r"<script>\s*window\." + re.escape(variable_name) + r"\s*=\s*(?P<body>.*?);\s*</script>",
        flags=re.DOTALL,
    )


def extract_data_json_from_html_text(html_text: str, *, variable_name: str = DEFAULT_DATA_VARIABLE) -> str:
    matches = list(_assignment_re(variable_name).finditer(html_text))
    if not matches:
        raise HtmlDataExtractError(f"No <script>window.{variable_name} = ...;</script> block found in HTML.")
    if len(matches) > 1:
        raise HtmlDataExtractError(
            f"Found {len(matches)} window.{variable_name} assignments in HTML; expected exactly one."
        )
    return matches[0].group("body").strip()


def extract_data_from_html_text(html_text: str, *, variable_name: str = DEFAULT_DATA_VARIABLE) -> Any:
    """
    Parse the payload of the `<script>window.NAME = ...;</script>` block.

    Round-trips with websummary.embed.embed_data(): the returned value is
    equal to the value that was embedded.
    """
    body = extract_data_json_from_html_text(html_text, variable_name=variable_name)
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise HtmlDataExtractError(f"window.{variable_name} payload is not valid JSON: {e}") from e


def extract_data_from_html_file(path: Union[str, Path], *, variable_name: str = DEFAULT_DATA_VARIABLE) -> Any:
    p = Path(path)
    html = p.read_text(encoding="utf-8")
    return extract_data_from_html_text(html, variable_name=variable_name)


__all__ = [
    "HtmlDataExtractError",
    "extract_data_from_html_file",
    "extract_data_from_html_text",
    "extract_data_json_from_html_text",
]
