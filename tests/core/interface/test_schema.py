"""Tests for schema conversion and tool parameter rendering."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from llmwire.core.interface.models import Schema, SchemaType
from llmwire.core.interface.schema import (
    empty_object_schema,
    render_parameters,
    to_strict_schema,
    to_vendor_schema,
)


def _weather_schema() -> Schema:
    return Schema(
        type=SchemaType.OBJECT,
        description="Weather query",
        required=["city"],
        properties={
            "city": Schema(type=SchemaType.STRING, description="City name"),
            "unit": Schema(type=SchemaType.STRING, enum=["c", "f"]),
            "days": Schema(type=SchemaType.INTEGER),
            "hours": Schema(type=SchemaType.ARRAY, items=Schema(type=SchemaType.NUMBER)),
        },
    )


class TestToVendorSchema:
    def test_none_is_empty_object(self) -> None:
        assert to_vendor_schema(None) == {"type": "object", "properties": {}}

    def test_full_tree(self) -> None:
        result = to_vendor_schema(_weather_schema())
        assert result == {
            "type": "object",
            "description": "Weather query",
            "required": ["city"],
            "properties": {
                "city": {"type": "string", "description": "City name"},
                "unit": {"type": "string", "enum": ["c", "f"]},
                "days": {"type": "integer"},
                "hours": {"type": "array", "items": {"type": "number"}},
            },
        }

    def test_unspecified_type_defaults_to_string(self) -> None:
        assert to_vendor_schema(Schema()) == {"type": "string"}

    def test_boolean(self) -> None:
        assert to_vendor_schema(Schema(type=SchemaType.BOOLEAN)) == {"type": "boolean"}

    def test_mapping_nodes(self) -> None:
        result = to_vendor_schema({"type": "OBJECT", "properties": {"n": {"type": "number"}}})
        assert result == {"type": "object", "properties": {"n": {"type": "number"}}}

    def test_unknown_type_tag_defaults_to_string(self) -> None:
        assert to_vendor_schema({"type": "DATE"}) == {"type": "string"}

    def test_malformed_nodes_degrade(self) -> None:
        result = to_vendor_schema(
            {"type": 7, "properties": {"ok": {"type": "boolean"}, "bad": 42}, "items": "nope"}
        )
        assert result == {"type": "string", "properties": {"ok": {"type": "boolean"}}}


class _PydanticParams(BaseModel):
    type: str = "object"
    properties: dict[str, Any] = {"q": {"type": "string"}}


@dataclass
class _PlainParams:
    type: str = "object"
    properties: dict[str, Any] = field(default_factory=lambda: {"n": {"type": "integer"}})


class TestRenderParameters:
    def test_schema_instance(self) -> None:
        assert render_parameters(_weather_schema())["required"] == ["city"]

    def test_none(self) -> None:
        assert render_parameters(None) == empty_object_schema()

    def test_mapping_passes_through(self) -> None:
        raw = {"type": "object", "properties": {}, "additionalProperties": False}
        assert render_parameters(raw) == raw

    def test_framework_model_round_trip(self) -> None:
        assert render_parameters(_PydanticParams()) == {
            "type": "object",
            "properties": {"q": {"type": "string"}},
        }

    def test_plain_object_round_trip(self) -> None:
        assert render_parameters(_PlainParams()) == {
            "type": "object",
            "properties": {"n": {"type": "integer"}},
        }

    def test_unrenderable_value(self) -> None:
        assert render_parameters(42) == empty_object_schema()


class TestStrictSchema:
    def test_objects_closed_and_required(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "child": {"type": "object", "properties": {"x": {"type": "number"}}},
            },
        }
        strict = to_strict_schema(schema)
        assert strict["additionalProperties"] is False
        assert strict["required"] == ["name", "child"]
        assert strict["properties"]["child"]["additionalProperties"] is False
        assert strict["properties"]["child"]["required"] == ["x"]
        assert "additionalProperties" not in schema

    def test_existing_required_kept(self) -> None:
        strict = to_strict_schema({"type": "object", "properties": {"a": {}, "b": {}}, "required": ["a"]})
        assert strict["required"] == ["a"]

    def test_property_named_properties(self) -> None:
        strict = to_strict_schema(
            {
                "type": "object",
                "properties": {"properties": {"type": "string"}, "name": {"type": "string"}},
            }
        )
        assert strict["properties"] == {"properties": {"type": "string"}, "name": {"type": "string"}}
        assert strict["required"] == ["properties", "name"]

    def test_subschema_keywords(self) -> None:
        obj = {"type": "object", "properties": {"x": {"type": "number"}}}
        strict = to_strict_schema(
            {
                "type": "object",
                "properties": {
                    "tags": {"type": "array", "items": obj},
                    "either": {"anyOf": [obj, {"type": "null"}]},
                    "ref": {"$ref": "#/$defs/Point"},
                },
                "$defs": {"Point": obj},
            }
        )
        assert strict["properties"]["tags"]["items"]["additionalProperties"] is False
        assert strict["properties"]["either"]["anyOf"][0]["required"] == ["x"]
        assert strict["properties"]["either"]["anyOf"][1] == {"type": "null"}
        assert strict["$defs"]["Point"]["additionalProperties"] is False
        assert "Point" not in strict["required"]
