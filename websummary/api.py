"""websummary.api

Stable *library* entrypoint for websummary.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from websummary.assemble import NO_DATA, AssembledDocument, assemble, assemble_file, write_document
from websummary.budget import BudgetCheck, check_size_budget, enforce_size_budget, measure
from websummary.config import DEFAULT_SIZE_CEILING_BYTES, AssemblyConfig
from websummary.embed import embed_data, load_payload, serialize_payload
from websummary.errors import (
    AssemblyError,
    DuplicateSlot,
    IncludeDepthExceeded,
    ResourceNotFound,
    ResourceReadError,
    SerializationError,
    SizeBudgetExceeded,
    SlotError,
    UnresolvedSlot,
)
from websummary.html_extract import extract_data_from_html_file, extract_data_from_html_text
from websummary.resolve import ChainSource, ComponentSource, MappingSource, SearchPathSource
from websummary.shell import DEFAULT_SHELL, load_shell
from websummary.slots import SlotContent, SlotKind, inline_slots


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "AssembledDocument",
    "AssemblyConfig",
    "AssemblyError",
    "BudgetCheck",
    "ChainSource",
    "ComponentSource",
    "DEFAULT_SHELL",
    "DEFAULT_SIZE_CEILING_BYTES",
    "DuplicateSlot",
    "IncludeDepthExceeded",
    "MappingSource",
    "NO_DATA",
    "ResourceNotFound",
    "ResourceReadError",
    "SearchPathSource",
    "SerializationError",
    "SizeBudgetExceeded",
    "SlotContent",
    "SlotError",
    "SlotKind",
    "UnresolvedSlot",
    "assemble",
    "assemble_file",
    "check_size_budget",
    "embed_data",
    "enforce_size_budget",
    "extract_data_from_html_file",
    "extract_data_from_html_text",
    "inline_slots",
    "load_payload",
    "load_shell",
    "measure",
    "serialize_payload",
    "write_document",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
