"""Chunker implementation.

Paragraphs are newline-delimited lines, blank lines included. Segments are
closed before a paragraph that would push them past the character bound, so a
markdown construct on one line is never cut in half.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ContentSegment:
    """An ordered slice of source text.

    Attributes:
        index: 1-based position of the segment in the document.
        text: Segment text, every paragraph terminated by a newline.
    """

    index: int
    text: str

    @property
    def is_first(self) -> bool:
        """True for the segment that opens the document."""
        return self.index == 1

    def __len__(self) -> int:
        return len(self.text)


def split(text: str, max_chars: int) -> list[ContentSegment]:
    """Split text into paragraph-aligned segments.

    A paragraph longer than ``max_chars`` becomes an oversized segment on its
    own. Whitespace-only trailing content is not emitted as a segment.

    Args:
        text: Source document.
        max_chars: Upper bound on segment length in characters.

    Returns:
        Segments in document order, indexed from 1.

    Raises:
        ValueError: If max_chars is not positive.

    Example:
        >>> [s.text for s in split("A\\nB\\nC\\n", 3)]
        ['A\\n', 'B\\n', 'C\\n\\n']
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    chunks: list[str] = []
    buffer = ""

    for paragraph in text.split("\n"):
        if buffer and len(buffer) + len(paragraph) + 1 > max_chars:
            chunks.append(buffer)
            buffer = ""
        buffer += paragraph + "\n"

    if buffer.strip():
        chunks.append(buffer)

    return [ContentSegment(index=i, text=chunk) for i, chunk in enumerate(chunks, 1)]


__all__ = ["ContentSegment", "split"]
