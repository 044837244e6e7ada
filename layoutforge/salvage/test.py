"""Tests for the JSON salvage parser.

Covers:
- Candidate extraction strategies (fenced, whole text, bracket scan)
- The single repair pass
- Failure types and their diagnostics
"""

import json

import pytest

from .lib import (
    EXCERPT_LENGTH,
    ExtractionError,
    ParseError,
    SalvageError,
    extract_candidate,
    repair_json_text,
    salvage,
)

DESIGN_LIKE = {
    "theme_name": "Midnight Terminal",
    "layout_type": "seamless",
    "heading2": "text-2xl font-mono text-emerald-400 {accent}",
    "tags": ["dark", "mono"],
    "nested": {"depth": [1, 2, {"x": "}"}]},
}


# =============================================================================
# Extraction
# =============================================================================


class TestFencedBlocks:
    """Strategy 1: fenced code blocks."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value",
        [
            DESIGN_LIKE,
            [1, 2, 3],
            {"emoji": "🚀 launch", "quote": 'He said "hi"'},
            [],
        ],
    )
    def test_prose_wrapped_fenced_json(self, value):
        """A fenced block inside prose returns the original value."""
        raw = "prefix text\n```json\n" + json.dumps(value) + "\n```\nsuffix"
        assert salvage(raw) == value

    @pytest.mark.unit
    def test_untagged_fence(self):
        """Fences without a language tag are accepted."""
        assert salvage('Result:\n```\n{"ok": true}\n```') == {"ok": True}

    @pytest.mark.unit
    def test_uppercase_tag(self):
        """The json tag is case-insensitive."""
        assert salvage('```JSON\n{"ok": 1}\n```') == {"ok": 1}

    @pytest.mark.unit
    def test_skips_non_json_fence(self):
        """The first fence that looks like JSON wins."""
        raw = (
            "Here is some code:\n```python\nprint('hi')\n```\n"
            'And the data:\n```json\n{"picked": "second"}\n```'
        )
        assert salvage(raw) == {"picked": "second"}

    @pytest.mark.unit
    def test_first_of_multiple_json_fences(self):
        """With several JSON fences, the first one is used."""
        raw = '```json\n{"n": 1}\n```\n```json\n{"n": 2}\n```'
        assert salvage(raw) == {"n": 1}


class TestWholeText:
    """Strategy 2: the response itself is JSON."""

    @pytest.mark.unit
    def test_plain_object(self):
        """Surrounding whitespace is ignored."""
        assert salvage('  \n{"a": 1}\n  ') == {"a": 1}

    @pytest.mark.unit
    def test_plain_array(self):
        """Top-level arrays are supported."""
        assert salvage("[1, 2]") == [1, 2]


class TestBracketScan:
    """Strategy 3: balanced scan from the earliest bracket."""

    @pytest.mark.unit
    def test_object_inside_prose(self):
        """Prose before and after the object is dropped."""
        raw = 'Sure! Here it is: {"id": "root", "n": 2} Hope this helps!'
        assert salvage(raw) == {"id": "root", "n": 2}

    @pytest.mark.unit
    def test_braces_inside_strings_ignored(self):
        """Braces in quoted strings do not affect depth."""
        raw = 'Output -> {"a": "}{]", "b": [1, {"c": "x"}]} trailing }'
        assert extract_candidate(raw) == '{"a": "}{]", "b": [1, {"c": "x"}]}'

    @pytest.mark.unit
    def test_escaped_quotes_inside_strings(self):
        """Escaped quotes keep the scanner inside the string."""
        raw = 'text {"a": "say \\"}\\" now"} more'
        assert salvage(raw) == {"a": 'say "}" now'}

    @pytest.mark.unit
    def test_earliest_opening_wins(self):
        """An array before an object is chosen first."""
        raw = 'values [1, 2] then {"a": 1}'
        assert extract_candidate(raw) == "[1, 2]"

    @pytest.mark.unit
    def test_truncated_candidate_runs_to_end(self):
        """Unbalanced input yields the remainder as candidate."""
        raw = 'partial: {"a": [1, 2'
        assert extract_candidate(raw) == '{"a": [1, 2'

    @pytest.mark.unit
    def test_truncated_candidate_fails_parse(self):
        """A truncated candidate is a ParseError, not an ExtractionError."""
        with pytest.raises(ParseError):
            salvage('partial: {"a": [1, 2')


# =============================================================================
# Repair
# =============================================================================


class TestRepair:
    """The single repair pass."""

    @pytest.mark.unit
    def test_js_style_object(self):
        """Bare keys, single quotes and trailing comma are repaired."""
        assert salvage("{a: 'x', b: 1,}") == {"a": "x", "b": 1}

    @pytest.mark.unit
    def test_trailing_comma_in_array(self):
        """Trailing commas before ] are removed."""
        assert salvage('{"items": ["a", "b",]}') == {"items": ["a", "b"]}

    @pytest.mark.unit
    def test_comments_removed(self):
        """Line and block comments are stripped."""
        raw = '{\n  // the theme\n  "theme": "dark", /* inline */ "n": 1\n}'
        assert salvage(raw) == {"theme": "dark", "n": 1}

    @pytest.mark.unit
    def test_url_in_string_survives_comment_strip(self):
        """Slashes inside strings are not treated as comments."""
        raw = '{"url": "https://example.com/a", "n": 1,}'
        assert salvage(raw) == {"url": "https://example.com/a", "n": 1}

    @pytest.mark.unit
    def test_apostrophe_in_double_quoted_string(self):
        """Apostrophes inside double-quoted strings are left alone."""
        raw = "{\"text\": \"don't stop\", 'k': 'v',}"
        assert salvage(raw) == {"text": "don't stop", "k": "v"}

    @pytest.mark.unit
    def test_single_quoted_string_with_double_quote(self):
        """Double quotes inside single-quoted strings are escaped."""
        assert salvage("{'q': 'say \"hi\"'}") == {"q": 'say "hi"'}

    @pytest.mark.unit
    def test_repair_text_strips_bom(self):
        """A leading byte-order mark is removed."""
        assert repair_json_text('\ufeff{"a": 1}') == '{"a": 1}'

    @pytest.mark.unit
    def test_repair_does_not_touch_string_commas(self):
        """Comma-brace sequences inside strings are preserved."""
        repaired = repair_json_text('{"a": "x,}", "b": 1,}')
        assert json.loads(repaired) == {"a": "x,}", "b": 1}

    @pytest.mark.unit
    def test_bare_keys_nested(self):
        """Nested bare keys are quoted."""
        assert salvage("{outer: {inner_key: 2}}") == {"outer": {"inner_key": 2}}


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    """Typed failures and their diagnostics."""

    @pytest.mark.unit
    def test_no_json_is_extraction_error(self):
        """Text without brackets fails extraction."""
        with pytest.raises(ExtractionError):
            salvage("no json here at all")

    @pytest.mark.unit
    def test_extraction_error_excerpt_truncated(self):
        """The excerpt carries at most the first 200 characters."""
        raw = "x" * 500
        with pytest.raises(ExtractionError) as exc_info:
            salvage(raw)
        assert exc_info.value.excerpt == "x" * EXCERPT_LENGTH

    @pytest.mark.unit
    def test_unrepairable_is_parse_error(self):
        """Garbage inside braces fails after one repair attempt."""
        with pytest.raises(ParseError) as exc_info:
            salvage("{this is :: not json at all}")
        error = exc_info.value
        assert error.original_error
        assert error.repaired_error
        assert error.original_error in str(error)
        assert error.repaired_error in str(error)

    @pytest.mark.unit
    def test_errors_share_base(self):
        """Both failure types derive from SalvageError and ValueError."""
        assert issubclass(ExtractionError, SalvageError)
        assert issubclass(ParseError, SalvageError)
        assert issubclass(SalvageError, ValueError)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw",
        ['{"a": NaN}', '{"a": Infinity}', '[1, -Infinity]', '{"a": 1e999}'],
        ids=["nan", "infinity", "negative-infinity", "overflow"],
    )
    def test_non_finite_numbers_are_parse_errors(self, raw):
        """Values with no JSON representation are rejected."""
        with pytest.raises(ParseError):
            salvage(raw)

    @pytest.mark.unit
    def test_large_integers_kept(self):
        """Integer literals are never treated as overflowing."""
        assert salvage('{"n": 123456789012345678901234567890}') == {
            "n": 123456789012345678901234567890
        }
