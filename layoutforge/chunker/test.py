"""Tests for the paragraph chunker."""

import pytest

from .lib import ContentSegment, split

SAMPLE_TEXTS = [
    "Hello world",
    "# Title\n\nFirst paragraph.\n\nSecond paragraph here.\n",
    "line one\nline two\nline three\nline four",
    "- item **one**\n- item two\n\n> a quote that runs on for a while\n\nTail",
    "A\nB\nC\n",
]


def _joined(segments: list[ContentSegment]) -> str:
    return "".join(segment.text for segment in segments)


class TestSplitBasics:
    """Direct examples with literal strings."""

    @pytest.mark.unit
    def test_boundary_example(self):
        """Each segment ends with a newline and order is preserved."""
        segments = split("A\nB\nC\n", 3)

        assert [s.text for s in segments] == ["A\n", "B\n", "C\n\n"]
        assert all(s.text.endswith("\n") for s in segments)
        assert [s.text.strip() for s in segments] == ["A", "B", "C"]

    @pytest.mark.unit
    def test_empty_input(self):
        """Empty input yields zero segments."""
        assert split("", 100) == []

    @pytest.mark.unit
    def test_whitespace_only_input(self):
        """Whitespace-only input yields zero segments."""
        assert split("\n\n  \n", 100) == []

    @pytest.mark.unit
    def test_short_text_single_segment(self):
        """Text under the bound stays in one segment."""
        segments = split("one\ntwo", 100)
        assert len(segments) == 1
        assert segments[0].text == "one\ntwo\n"

    @pytest.mark.unit
    def test_oversized_paragraph_not_split(self):
        """A paragraph longer than the bound becomes its own segment."""
        long_paragraph = "x" * 50
        segments = split(f"intro\n{long_paragraph}\noutro", 10)

        assert [s.text for s in segments] == [
            "intro\n",
            long_paragraph + "\n",
            "outro\n",
        ]

    @pytest.mark.unit
    def test_indices_are_one_based(self):
        """Segments are numbered from 1 in document order."""
        segments = split("a\nb\nc\nd", 2)
        assert [s.index for s in segments] == [1, 2, 3, 4]
        assert segments[0].is_first
        assert not segments[1].is_first

    @pytest.mark.unit
    def test_segment_length(self):
        """len() reports characters."""
        assert len(ContentSegment(index=1, text="abc\n")) == 4

    @pytest.mark.unit
    @pytest.mark.parametrize("max_chars", [0, -5])
    def test_invalid_bound(self, max_chars):
        """Non-positive bounds are rejected."""
        with pytest.raises(ValueError, match="max_chars"):
            split("text", max_chars)


class TestSplitProperties:
    """Invariants over a handful of inputs and bounds."""

    @pytest.mark.unit
    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    @pytest.mark.parametrize("max_chars", [1, 5, 12, 40, 1000])
    def test_reconstructs_original(self, text, max_chars):
        """Dropping the final re-inserted newline gives back the source text."""
        joined = _joined(split(text, max_chars))

        restored = joined[:-1]
        assert text.startswith(restored)
        assert text[len(restored) :].strip() == ""

    @pytest.mark.unit
    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    def test_reconstructs_exactly_when_single_segment(self, text):
        """One segment equals the text plus the re-inserted newline."""
        segments = split(text, 10_000)
        assert len(segments) == 1
        assert segments[0].text == text + "\n"

    @pytest.mark.unit
    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    @pytest.mark.parametrize("max_chars", [1, 5, 12, 40])
    def test_respects_bound(self, text, max_chars):
        """Only lone paragraphs may exceed the bound."""
        for segment in split(text, max_chars):
            if len(segment) > max_chars:
                assert segment.text.count("\n") == 1

    @pytest.mark.unit
    def test_deterministic(self):
        """Same input, same output."""
        text = SAMPLE_TEXTS[3]
        assert split(text, 12) == split(text, 12)
