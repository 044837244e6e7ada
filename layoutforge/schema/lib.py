"""Authoritative schema module for generated design systems.

This module is the single source of truth for the structured output the
orchestrator asks models for. It provides:
- A provider-neutral schema descriptor (`SchemaDescriptor`)
- Two pure renderers: native provider schema and human-readable contract text
- The `DesignSystem` model and its layout enums
- The placeholder `DEFAULT_DESIGN`

All schema-related queries should route through this module.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SchemaType(str, Enum):
    """Primitive and structural types understood by the descriptor."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class LayoutKind(str, Enum):
    """Page structure of a design system.

    - SINGLE_CONTAINER: Content sits on one floating card over the page
    - SEAMLESS: Content flows directly on the page background
    - MULTI_CONTAINER_GRID: Sections are split into a grid of cards
    """

    SINGLE_CONTAINER = "single-container"
    SEAMLESS = "seamless"
    MULTI_CONTAINER_GRID = "multi-container-grid"


class LayoutPreference(str, Enum):
    """Caller hint for the layout kind. AUTO leaves the choice to the model."""

    AUTO = "auto"
    SINGLE_CONTAINER = "single-container"
    SEAMLESS = "seamless"
    MULTI_CONTAINER_GRID = "multi-container-grid"


# === SCHEMA DESCRIPTOR ===


@dataclass(frozen=True)
class SchemaProperty:
    """Named field of an object descriptor."""

    name: str
    schema: "SchemaDescriptor"
    required: bool = True


@dataclass(frozen=True)
class SchemaDescriptor:
    """Provider-neutral description of a structured output.

    An object carries `properties`, an array carries `items`, and a primitive
    may carry an `enum` constraint. Construction rejects inconsistent shapes.

    Attributes:
        type: Structural or primitive type.
        properties: Child fields (objects only).
        items: Element descriptor (arrays only).
        enum: Allowed values (primitives only).
        description: Optional human-readable hint.
    """

    type: SchemaType
    properties: tuple[SchemaProperty, ...] = field(default_factory=tuple)
    items: "SchemaDescriptor | None" = None
    enum: tuple[str, ...] | None = None
    description: str | None = None

    def __post_init__(self):
        if self.type == SchemaType.ARRAY and self.items is None:
            raise ValueError("Array descriptor requires 'items'")
        if self.type != SchemaType.ARRAY and self.items is not None:
            raise ValueError(f"'items' is only valid for arrays, not {self.type.value}")
        if self.type != SchemaType.OBJECT and self.properties:
            raise ValueError(
                f"'properties' is only valid for objects, not {self.type.value}"
            )
        if self.enum is not None and self.type in (SchemaType.OBJECT, SchemaType.ARRAY):
            raise ValueError("'enum' is only valid for primitive descriptors")
        names = [prop.name for prop in self.properties]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate property names: {names}")

    @property
    def required_names(self) -> list[str]:
        """Names of required properties, in declaration order."""
        return [prop.name for prop in self.properties if prop.required]


def to_native_schema(descriptor: SchemaDescriptor) -> dict[str, Any]:
    """Render a descriptor as a google-genai response schema dict.

    Args:
        descriptor: Schema to render.

    Returns:
        Dict accepted by `GenerateContentConfig.response_schema`.

    Example:
        >>> to_native_schema(SchemaDescriptor(SchemaType.STRING, enum=("a", "b")))
        {'type': 'STRING', 'enum': ['a', 'b']}
    """
    native: dict[str, Any] = {"type": descriptor.type.value.upper()}

    if descriptor.description:
        native["description"] = descriptor.description
    if descriptor.enum is not None:
        native["enum"] = list(descriptor.enum)

    if descriptor.type == SchemaType.OBJECT:
        native["properties"] = {
            prop.name: to_native_schema(prop.schema) for prop in descriptor.properties
        }
        required = descriptor.required_names
        if required:
            native["required"] = required

    if descriptor.type == SchemaType.ARRAY and descriptor.items is not None:
        native["items"] = to_native_schema(descriptor.items)

    return native


def _describe_type(descriptor: SchemaDescriptor) -> str:
    text = descriptor.type.value
    if descriptor.type == SchemaType.ARRAY and descriptor.items is not None:
        text = f"array of {descriptor.items.type.value}"
    if descriptor.enum is not None:
        text += " (one of: " + ", ".join(f'"{v}"' for v in descriptor.enum) + ")"
    return text


def _render_lines(descriptor: SchemaDescriptor, indent: int) -> list[str]:
    pad = "  " * indent
    lines: list[str] = []

    if descriptor.type == SchemaType.ARRAY and descriptor.items is not None:
        if descriptor.items.type == SchemaType.OBJECT:
            lines.append(f"{pad}each element is an object with fields:")
            lines.extend(_render_lines(descriptor.items, indent + 1))
        return lines

    for prop in descriptor.properties:
        flag = "required" if prop.required else "optional"
        line = f"{pad}- {prop.name}: {_describe_type(prop.schema)}, {flag}"
        if prop.schema.description:
            line += f". {prop.schema.description}"
        lines.append(line)
        if prop.schema.type in (SchemaType.OBJECT, SchemaType.ARRAY):
            lines.extend(_render_lines(prop.schema, indent + 1))

    return lines


def to_prompt_text(descriptor: SchemaDescriptor) -> str:
    """Render a descriptor as a textual contract for prompt injection.

    Lists every field with its primitive type, whether it is required and any
    allowed enum values, nesting children by indentation.

    Args:
        descriptor: Schema to render.

    Returns:
        Multi-line contract text.
    """
    header = f"The response must be a JSON {_describe_type(descriptor)}"
    body = _render_lines(descriptor, 0)
    if not body:
        return header + "."
    return header + " with these fields:\n" + "\n".join(body)


# === DESIGN SYSTEM ===


class DesignSystem(BaseModel):
    """Reusable visual design for a styled document.

    Every style attribute is a non-empty string of Tailwind utility classes,
    except `highlight_color` (a hex color) and `layout_type`.
    """

    model_config = ConfigDict(
        extra="ignore", str_strip_whitespace=True, use_enum_values=True
    )

    # Identity
    id: str = Field(..., min_length=1, description="Unique design identifier")
    theme_name: str = Field(
        ..., min_length=1, description="Short theme name, e.g. 'Modern Dark'"
    )

    # Layout structure
    layout_type: LayoutKind = Field(..., description="Page structure")

    # Container styles
    page_background: str = Field(
        ..., min_length=1, description="Page background class, e.g. 'bg-slate-100'"
    )
    container_background: str = Field(
        ..., min_length=1, description="Container background class, e.g. 'bg-white'"
    )
    container_shadow: str = Field(
        ..., min_length=1, description="Container shadow class, e.g. 'shadow-xl'"
    )
    container_max_width: str = Field(
        ..., min_length=1, description="Container width class, e.g. 'max-w-3xl'"
    )
    container_padding: str = Field(
        ..., min_length=1, description="Container padding classes, e.g. 'p-8 md:p-12'"
    )
    container_border_radius: str = Field(
        ..., min_length=1, description="Container radius class, e.g. 'rounded-xl'"
    )

    # Typography
    font_family: str = Field(
        ..., min_length=1, description="Font family class, e.g. 'font-serif'"
    )
    base_font_size: str = Field(
        ..., min_length=1, description="Body text size class, e.g. 'text-lg'"
    )
    line_height: str = Field(
        ..., min_length=1, description="Leading class, e.g. 'leading-relaxed'"
    )
    text_color: str = Field(
        ..., min_length=1, description="Body text color class, e.g. 'text-slate-800'"
    )

    # Elements
    title_size: str = Field(
        ..., min_length=1, description="H1 size classes, e.g. 'text-4xl md:text-6xl'"
    )
    heading1: str = Field(
        ..., min_length=1, description="H1 color, weight and spacing classes, no size"
    )
    heading2: str = Field(
        ..., min_length=1, description="H2 classes, the main visual anchor"
    )
    paragraph: str = Field(..., min_length=1, description="Paragraph classes")
    blockquote: str = Field(..., min_length=1, description="Blockquote classes")
    highlight_color: str = Field(
        ..., min_length=1, description="Hex accent color, e.g. '#6366f1'"
    )

    # Decorative
    divider_style: str = Field(
        ..., min_length=1, description="Horizontal rule classes"
    )

    @property
    def is_placeholder(self) -> bool:
        """True for the built-in placeholder design."""
        return self.id == DEFAULT_DESIGN_ID


DEFAULT_DESIGN_ID = "default"

DEFAULT_DESIGN = DesignSystem(
    id=DEFAULT_DESIGN_ID,
    theme_name="Clean Paper",
    layout_type=LayoutKind.SINGLE_CONTAINER,
    page_background="bg-slate-100",
    container_background="bg-white",
    container_shadow="shadow-lg",
    container_max_width="max-w-4xl",
    container_padding="p-8 md:p-16",
    container_border_radius="rounded-none",
    font_family="font-sans",
    base_font_size="text-base",
    line_height="leading-7",
    text_color="text-slate-700",
    title_size="text-4xl md:text-5xl",
    heading1="font-bold text-slate-900 mb-8 tracking-tight",
    heading2=(
        "text-2xl font-semibold text-slate-800 mt-10 mb-4 "
        "border-l-4 border-indigo-500 pl-4"
    ),
    paragraph="mb-6",
    blockquote=(
        "italic text-slate-600 border-l-4 border-slate-300 pl-4 py-2 my-8 bg-slate-50"
    ),
    highlight_color="#6366f1",
    divider_style="my-12 border-slate-200",
)


# === SCHEMA GENERATION ===


def _design_properties() -> tuple[SchemaProperty, ...]:
    """Build descriptor properties from the DesignSystem fields, minus id."""
    properties = []
    for name, info in DesignSystem.model_fields.items():
        if name == "id":
            continue
        enum = tuple(kind.value for kind in LayoutKind) if name == "layout_type" else None
        properties.append(
            SchemaProperty(
                name=name,
                schema=SchemaDescriptor(
                    type=SchemaType.STRING, enum=enum, description=info.description
                ),
            )
        )
    return tuple(properties)


DESIGN_SCHEMA = SchemaDescriptor(
    type=SchemaType.OBJECT,
    properties=_design_properties(),
)

DESIGN_VARIATIONS_SCHEMA = SchemaDescriptor(
    type=SchemaType.OBJECT,
    properties=(
        SchemaProperty(
            name="designs",
            schema=SchemaDescriptor(type=SchemaType.ARRAY, items=DESIGN_SCHEMA),
        ),
    ),
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
