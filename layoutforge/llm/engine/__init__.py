"""Completion engine.

Provides the CompletionEngine that turns one CompletionRequest into response
text on either provider kind, plus config-driven `complete` and `stream`.
"""

from .lib import (
    JSON_BLOCK_DIRECTIVE,
    CompletionEngine,
    build_json_instruction,
    complete,
    stream,
)

__all__ = [
    "CompletionEngine",
    "JSON_BLOCK_DIRECTIVE",
    "build_json_instruction",
    "complete",
    "stream",
]
