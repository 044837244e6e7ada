"""Schema module - authoritative source for structured output definitions.

This module provides:
- A provider-neutral schema descriptor with native and prompt renderers
- The DesignSystem model, layout enums and the placeholder design
- Ready-made descriptors for single designs and design variations

Example usage:
    >>> from layoutforge.schema import DESIGN_SCHEMA, to_prompt_text
    >>> contract = to_prompt_text(DESIGN_SCHEMA)  # For prompt injection
"""

from .lib import (
    DEFAULT_DESIGN,
    DEFAULT_DESIGN_ID,
    DESIGN_SCHEMA,
    DESIGN_VARIATIONS_SCHEMA,
    DesignSystem,
    LayoutKind,
    LayoutPreference,
    SchemaDescriptor,
    SchemaProperty,
    SchemaType,
    to_native_schema,
    to_prompt_text,
)

__all__ = [
    # Enums
    "SchemaType",
    "LayoutKind",
    "LayoutPreference",
    # Descriptor
    "SchemaProperty",
    "SchemaDescriptor",
    "to_native_schema",
    "to_prompt_text",
    # Design system
    "DesignSystem",
    "DEFAULT_DESIGN",
    "DEFAULT_DESIGN_ID",
    "DESIGN_SCHEMA",
    "DESIGN_VARIATIONS_SCHEMA",
]
