"""Unit tests for the Schema module."""

import pytest
from pydantic import ValidationError

from layoutforge.schema import (
    DEFAULT_DESIGN,
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


def _design_payload(**overrides) -> dict:
    payload = DEFAULT_DESIGN.model_dump()
    payload["id"] = "gen-test"
    payload.update(overrides)
    return payload


class TestSchemaDescriptor:
    """Tests for descriptor construction rules."""

    @pytest.mark.unit
    def test_array_requires_items(self):
        """Arrays without an element descriptor are rejected."""
        with pytest.raises(ValueError, match="items"):
            SchemaDescriptor(type=SchemaType.ARRAY)

    @pytest.mark.unit
    def test_items_only_on_arrays(self):
        """Non-array descriptors cannot carry items."""
        with pytest.raises(ValueError, match="items"):
            SchemaDescriptor(
                type=SchemaType.STRING, items=SchemaDescriptor(SchemaType.STRING)
            )

    @pytest.mark.unit
    def test_properties_only_on_objects(self):
        """Primitive descriptors cannot carry properties."""
        with pytest.raises(ValueError, match="properties"):
            SchemaDescriptor(
                type=SchemaType.STRING,
                properties=(SchemaProperty("a", SchemaDescriptor(SchemaType.STRING)),),
            )

    @pytest.mark.unit
    def test_enum_only_on_primitives(self):
        """Objects cannot carry an enum constraint."""
        with pytest.raises(ValueError, match="enum"):
            SchemaDescriptor(type=SchemaType.OBJECT, enum=("a",))

    @pytest.mark.unit
    def test_duplicate_property_names(self):
        """Property names must be unique."""
        prop = SchemaProperty("a", SchemaDescriptor(SchemaType.STRING))
        with pytest.raises(ValueError, match="Duplicate"):
            SchemaDescriptor(type=SchemaType.OBJECT, properties=(prop, prop))

    @pytest.mark.unit
    def test_required_names(self):
        """Only required properties are listed, in order."""
        descriptor = SchemaDescriptor(
            type=SchemaType.OBJECT,
            properties=(
                SchemaProperty("b", SchemaDescriptor(SchemaType.STRING)),
                SchemaProperty("a", SchemaDescriptor(SchemaType.INTEGER), False),
                SchemaProperty("c", SchemaDescriptor(SchemaType.BOOLEAN)),
            ),
        )
        assert descriptor.required_names == ["b", "c"]


class TestNativeSchema:
    """Tests for the google-genai renderer."""

    @pytest.mark.unit
    def test_primitive_with_enum(self):
        """Types are uppercased and enums listed."""
        native = to_native_schema(
            SchemaDescriptor(type=SchemaType.STRING, enum=("x", "y"))
        )
        assert native == {"type": "STRING", "enum": ["x", "y"]}

    @pytest.mark.unit
    def test_nested_object_and_array(self):
        """Objects carry properties and required, arrays carry items."""
        descriptor = SchemaDescriptor(
            type=SchemaType.OBJECT,
            properties=(
                SchemaProperty(
                    "tags",
                    SchemaDescriptor(
                        type=SchemaType.ARRAY,
                        items=SchemaDescriptor(SchemaType.STRING),
                    ),
                ),
                SchemaProperty("count", SchemaDescriptor(SchemaType.INTEGER), False),
            ),
        )
        native = to_native_schema(descriptor)

        assert native["type"] == "OBJECT"
        assert native["required"] == ["tags"]
        assert native["properties"]["tags"] == {
            "type": "ARRAY",
            "items": {"type": "STRING"},
        }
        assert native["properties"]["count"] == {"type": "INTEGER"}

    @pytest.mark.unit
    def test_design_schema_layout_enum(self):
        """layout_type is constrained to the three layout kinds."""
        native = to_native_schema(DESIGN_SCHEMA)
        assert native["properties"]["layout_type"]["enum"] == [
            "single-container",
            "seamless",
            "multi-container-grid",
        ]

    @pytest.mark.unit
    def test_variations_schema_shape(self):
        """Variations are an object wrapping a designs array."""
        native = to_native_schema(DESIGN_VARIATIONS_SCHEMA)
        assert native["required"] == ["designs"]
        designs = native["properties"]["designs"]
        assert designs["type"] == "ARRAY"
        assert designs["items"]["type"] == "OBJECT"


class TestPromptText:
    """Tests for the textual contract renderer."""

    @pytest.mark.unit
    def test_lists_every_design_field(self):
        """Every field appears with type and required flag."""
        text = to_prompt_text(DESIGN_SCHEMA)
        for prop in DESIGN_SCHEMA.properties:
            assert f"- {prop.name}: string" in text
        assert "required" in text

    @pytest.mark.unit
    def test_enum_values_rendered(self):
        """Enum values are quoted in the contract."""
        text = to_prompt_text(DESIGN_SCHEMA)
        assert '"single-container"' in text
        assert '"multi-container-grid"' in text

    @pytest.mark.unit
    def test_optional_flag(self):
        """Optional fields are marked as such."""
        descriptor = SchemaDescriptor(
            type=SchemaType.OBJECT,
            properties=(
                SchemaProperty("note", SchemaDescriptor(SchemaType.STRING), False),
            ),
        )
        assert "- note: string, optional" in to_prompt_text(descriptor)

    @pytest.mark.unit
    def test_nested_array_of_objects(self):
        """Array elements are rendered beneath their field."""
        text = to_prompt_text(DESIGN_VARIATIONS_SCHEMA)
        assert text.startswith("The response must be a JSON object")
        assert "- designs: array of object, required" in text
        assert "each element is an object with fields:" in text
        assert "    - heading2: string" in text

    @pytest.mark.unit
    def test_primitive_without_fields(self):
        """Primitive descriptors render as a single sentence."""
        assert to_prompt_text(SchemaDescriptor(SchemaType.BOOLEAN)) == (
            "The response must be a JSON boolean."
        )


class TestDesignSystem:
    """Tests for the DesignSystem model."""

    @pytest.mark.unit
    def test_schema_matches_model_fields(self):
        """Descriptor fields mirror the model fields, minus id."""
        names = [prop.name for prop in DESIGN_SCHEMA.properties]
        expected = [name for name in DesignSystem.model_fields if name != "id"]
        assert names == expected
        assert DESIGN_SCHEMA.required_names == expected

    @pytest.mark.unit
    def test_default_design_is_placeholder(self):
        """The placeholder design reports itself as such."""
        assert DEFAULT_DESIGN.id == "default"
        assert DEFAULT_DESIGN.is_placeholder
        assert DEFAULT_DESIGN.theme_name == "Clean Paper"
        assert DEFAULT_DESIGN.layout_type == LayoutKind.SINGLE_CONTAINER

    @pytest.mark.unit
    def test_generated_design_not_placeholder(self):
        """Any other id is a real design."""
        design = DesignSystem.model_validate(_design_payload())
        assert not design.is_placeholder

    @pytest.mark.unit
    def test_missing_attribute_rejected(self):
        """A missing style attribute fails validation."""
        payload = _design_payload()
        del payload["heading2"]
        with pytest.raises(ValidationError):
            DesignSystem.model_validate(payload)

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_attribute_rejected(self, value):
        """Empty and whitespace-only attributes fail validation."""
        with pytest.raises(ValidationError):
            DesignSystem.model_validate(_design_payload(paragraph=value))

    @pytest.mark.unit
    def test_unknown_layout_rejected(self):
        """layout_type must be one of the layout kinds."""
        with pytest.raises(ValidationError):
            DesignSystem.model_validate(_design_payload(layout_type="card"))

    @pytest.mark.unit
    def test_extra_fields_ignored(self):
        """Unexpected keys from the model are dropped."""
        design = DesignSystem.model_validate(_design_payload(mood="calm"))
        assert "mood" not in design.model_dump()

    @pytest.mark.unit
    def test_layout_stored_as_value(self):
        """Enum values serialize as plain strings."""
        design = DesignSystem.model_validate(_design_payload(layout_type="seamless"))
        assert design.model_dump()["layout_type"] == "seamless"


class TestLayoutPreference:
    """Tests for the layout preference enum."""

    @pytest.mark.unit
    def test_preference_covers_every_kind(self):
        """Every layout kind is also a preference, plus auto."""
        values = {p.value for p in LayoutPreference}
        assert values == {k.value for k in LayoutKind} | {"auto"}
