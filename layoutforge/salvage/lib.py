"""Best-effort JSON extraction from free-form LLM output.

Models asked for JSON routinely wrap it in prose, emit several fenced blocks,
use single quotes, leave trailing commas or forget to quote keys. `salvage`
locates the most plausible JSON candidate and parses it, allowing exactly one
textual repair pass before giving up.

Candidate strategies, first success wins:
    1. A fenced code block (optionally tagged ``json``) starting with { or [
    2. The whole trimmed response when it starts with { or [
    3. A bracket scan from the earliest { or [ to its balanced close
"""

import json
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

# Length of the response excerpt carried by ExtractionError
EXCERPT_LENGTH = 200

_FENCED_BLOCK = re.compile(r"```[ \t]*(?:json)?[ \t]*\n?([\s\S]*?)```", re.IGNORECASE)

# Matches a double-quoted JSON string so repairs can leave it untouched
_DQ_STRING = r'"(?:\\.|[^"\\])*"'

_TRAILING_COMMA = re.compile(rf"({_DQ_STRING})|,(\s*[}}\]])")
_SINGLE_QUOTED = re.compile(rf"({_DQ_STRING})|'((?:\\.|[^'\\])*)'")
_COMMENT = re.compile(rf"({_DQ_STRING})|/\*[\s\S]*?\*/|//[^\n]*")
_BARE_KEY = re.compile(rf"({_DQ_STRING})|([{{,]\s*)([A-Za-z_$][\w$]*)(\s*:)")


class SalvageError(ValueError):
    """Base exception for salvage failures."""


class ExtractionError(SalvageError):
    """Raised when no JSON-shaped substring exists in the response.

    Attributes:
        excerpt: First characters of the response, for diagnosis.
    """

    def __init__(self, excerpt: str):
        super().__init__(f"No JSON object or array found in response: {excerpt!r}")
        self.excerpt = excerpt


class ParseError(SalvageError):
    """Raised when a candidate stays unparsable after the repair pass.

    Attributes:
        original_error: Parse error message for the raw candidate.
        repaired_error: Parse error message after repairs.
        candidate: The extracted candidate text.
    """

    def __init__(self, original_error: str, repaired_error: str, candidate: str):
        super().__init__(
            f"Failed to parse JSON candidate: {original_error}; "
            f"after repair: {repaired_error}"
        )
        self.original_error = original_error
        self.repaired_error = repaired_error
        self.candidate = candidate


# =============================================================================
# Candidate extraction
# =============================================================================


def _looks_like_json(text: str) -> bool:
    return text.startswith("{") or text.startswith("[")


def _from_fenced_block(text: str) -> str | None:
    for match in _FENCED_BLOCK.finditer(text):
        body = match.group(1).strip()
        if _looks_like_json(body):
            return body
    return None


def _from_bracket_scan(text: str) -> str | None:
    """Slice from the earliest { or [ to the point both depths return to zero.

    Braces inside double-quoted strings are ignored. If the text ends first,
    the remainder of the input is returned as a truncated candidate.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)

    brace_depth = 0
    bracket_depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            brace_depth += 1
        elif char == "}":
            brace_depth -= 1
        elif char == "[":
            bracket_depth += 1
        elif char == "]":
            bracket_depth -= 1

        if brace_depth == 0 and bracket_depth == 0:
            return text[start : i + 1]

    return text[start:]


def extract_candidate(text: str) -> str:
    """Find the most plausible JSON substring in a response.

    Args:
        text: Raw model output.

    Returns:
        Candidate JSON text (may still be malformed).

    Raises:
        ExtractionError: If the text contains no { or [ at all.
    """
    candidate = _from_fenced_block(text)
    if candidate is not None:
        return candidate

    stripped = text.strip()
    if _looks_like_json(stripped):
        return stripped

    candidate = _from_bracket_scan(text)
    if candidate is not None:
        return candidate

    raise ExtractionError(text[:EXCERPT_LENGTH])


# =============================================================================
# Repair
# =============================================================================


def _keep_strings(replace):
    """Wrap a match handler so double-quoted strings pass through unchanged."""

    def handler(match: re.Match) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return replace(match)

    return handler


def _requote(match: re.Match) -> str:
    body = match.group(2).replace("\\'", "'").replace('"', '\\"')
    return f'"{body}"'


def repair_json_text(candidate: str) -> str:
    """Apply the fixed sequence of textual repairs once.

    Order: leading BOM, trailing commas, single-quoted strings, comments,
    bare object keys. Contents of double-quoted strings are preserved.

    Args:
        candidate: Candidate JSON text.

    Returns:
        Repaired text.
    """
    text = candidate.lstrip("\ufeff")
    text = _TRAILING_COMMA.sub(_keep_strings(lambda m: m.group(2)), text)
    text = _SINGLE_QUOTED.sub(_keep_strings(_requote), text)
    text = _COMMENT.sub(_keep_strings(lambda m: ""), text)
    text = _BARE_KEY.sub(
        _keep_strings(lambda m: f'{m.group(2)}"{m.group(3)}"{m.group(4)}'), text
    )
    return text


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _loads(text: str) -> Any:
    """Strict json.loads: NaN, Infinity and overflowing floats are errors."""
    return json.loads(
        text, parse_float=_finite_float, parse_constant=_reject_constant
    )


# =============================================================================
# Main Interface
# =============================================================================


def salvage(raw_text: str) -> Any:
    """Extract and parse a JSON value from untrusted model output.

    Args:
        raw_text: Raw response text.

    Returns:
        The parsed JSON value (dict, list, or scalar inside a container).

    Raises:
        ExtractionError: No JSON-shaped substring was found.
        ParseError: A candidate was found but stayed unparsable after repair.

    Example:
        >>> salvage("Sure! ```json\\n{\\"a\\": 1}\\n``` Enjoy.")
        {'a': 1}
        >>> salvage("{a: 'x', b: 1,}")
        {'a': 'x', 'b': 1}
    """
    candidate = extract_candidate(raw_text)

    try:
        return _loads(candidate)
    except ValueError as e:
        original_error = str(e)

    repaired = repair_json_text(candidate)
    try:
        value = _loads(repaired)
    except ValueError as e:
        raise ParseError(original_error, str(e), candidate) from e

    logger.debug(f"JSON candidate parsed after repair ({original_error})")
    return value


__all__ = [
    "SalvageError",
    "ExtractionError",
    "ParseError",
    "EXCERPT_LENGTH",
    "extract_candidate",
    "repair_json_text",
    "salvage",
]
