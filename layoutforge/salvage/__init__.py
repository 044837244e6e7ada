"""JSON salvage parsing for untrusted model output."""

from .lib import (
    EXCERPT_LENGTH,
    ExtractionError,
    ParseError,
    SalvageError,
    extract_candidate,
    repair_json_text,
    salvage,
)

__all__ = [
    "salvage",
    "extract_candidate",
    "repair_json_text",
    "SalvageError",
    "ExtractionError",
    "ParseError",
    "EXCERPT_LENGTH",
]
