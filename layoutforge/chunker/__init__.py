"""Paragraph-preserving text segmentation.

Splits long documents into bounded, ordered segments for the content
rewrite phase without ever breaking a paragraph across a boundary.
"""

from .lib import ContentSegment, split

__all__ = ["ContentSegment", "split"]
