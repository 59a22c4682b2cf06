"""Schema conversion — generic schema trees to vendor JSON-schema dicts.

Schemas only flow outward, so there is no reverse conversion. Conversion
never raises: malformed nodes degrade to whatever can be read from them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from copy import deepcopy
from typing import Any

from llmwire.core.interface.models import Schema, SchemaType

logger = logging.getLogger(__name__)

_TYPE_NAMES: dict[str, str] = {
    SchemaType.STRING.value: "string",
    SchemaType.NUMBER.value: "number",
    SchemaType.INTEGER.value: "integer",
    SchemaType.BOOLEAN.value: "boolean",
    SchemaType.ARRAY.value: "array",
    SchemaType.OBJECT.value: "object",
}

# JSON-schema keywords whose values are subschemas, a list of them, or a name map of them
_SUBSCHEMA_KEYS = ("items", "additionalItems", "not")
_SUBSCHEMA_LIST_KEYS = ("anyOf", "allOf", "oneOf", "prefixItems")
_SUBSCHEMA_MAP_KEYS = ("properties", "$defs", "definitions", "patternProperties")


def empty_object_schema() -> dict[str, Any]:
    """Schema for a parameterless tool."""
    return {"type": "object", "properties": {}}


def to_vendor_schema(schema: Schema | Mapping[str, Any] | None) -> dict[str, Any]:
    """Recursively convert a generic schema into a JSON-schema dict.

    Nodes may be :class:`Schema` instances or mappings with the same keys
    (as produced by ``Schema.model_dump()``). Unknown and unspecified type
    tags map to ``"string"``. A ``None`` schema becomes an empty object
    schema because vendors want a non-null schema for every tool.
    """
    if schema is None:
        return empty_object_schema()

    result: dict[str, Any] = {"type": _type_name(_field(schema, "type"))}

    description = _field(schema, "description")
    if isinstance(description, str) and description:
        result["description"] = description

    required = _field(schema, "required")
    if isinstance(required, (list, tuple)) and required:
        result["required"] = [str(name) for name in required]

    enum = _field(schema, "enum")
    if isinstance(enum, (list, tuple)) and enum:
        result["enum"] = list(enum)

    properties = _field(schema, "properties")
    if isinstance(properties, Mapping) and properties:
        converted: dict[str, Any] = {}
        for name, prop in properties.items():
            if isinstance(prop, (Schema, Mapping)):
                converted[str(name)] = to_vendor_schema(prop)
        result["properties"] = converted

    items = _field(schema, "items")
    if isinstance(items, (Schema, Mapping)):
        result["items"] = to_vendor_schema(items)

    return result


def render_parameters(parameters: Any) -> dict[str, Any]:
    """Resolve a tool's duck-typed parameter description to a JSON-schema dict.

    Resolution order: generic :class:`Schema`; ``None``; a plain mapping
    (taken as already-rendered JSON schema); anything else is round-tripped
    through JSON. Values that cannot be rendered become an empty object schema.
    """
    if isinstance(parameters, Schema):
        return to_vendor_schema(parameters)
    if parameters is None:
        return empty_object_schema()
    if isinstance(parameters, Mapping):
        return dict(parameters)

    try:
        decoded = json.loads(json.dumps(parameters, default=_json_default))
    except (TypeError, ValueError):
        logger.debug("Cannot render tool parameters of type %s", type(parameters).__name__)
        return empty_object_schema()
    if not isinstance(decoded, dict):
        return empty_object_schema()
    return decoded


def to_strict_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Normalize a JSON schema for strict structured output.

    Every object node gets ``additionalProperties: false`` and, unless it
    already declares one, a ``required`` list naming all its properties.
    """
    if not isinstance(schema, dict):
        return empty_object_schema()
    return _strict_node(deepcopy(schema))


def _strict_node(node: dict[str, Any]) -> dict[str, Any]:
    # Recurse by keyword so a property map is never mistaken for a schema
    for key in _SUBSCHEMA_KEYS:
        if isinstance(node.get(key), dict):
            node[key] = _strict_node(node[key])
    for key in _SUBSCHEMA_LIST_KEYS:
        if isinstance(node.get(key), list):
            node[key] = [_strict_node(s) if isinstance(s, dict) else s for s in node[key]]
    for key in _SUBSCHEMA_MAP_KEYS:
        if isinstance(node.get(key), dict):
            node[key] = {
                name: _strict_node(s) if isinstance(s, dict) else s for name, s in node[key].items()
            }

    properties = node.get("properties")
    if node.get("type") == "object" or isinstance(properties, dict):
        node["additionalProperties"] = False
        if "required" not in node:
            node["required"] = list(properties) if isinstance(properties, dict) else []
    return node


def _field(node: Schema | Mapping[str, Any], name: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(name)
    return getattr(node, name, None)


def _type_name(tag: Any) -> str:
    if isinstance(tag, SchemaType):
        tag = tag.value
    if not isinstance(tag, str):
        return "string"
    upper = tag.upper()
    if upper in _TYPE_NAMES:
        return _TYPE_NAMES[upper]
    return "string"


def _json_default(value: Any) -> Any:
    """Encode framework schema objects (pydantic models, plain objects)."""
    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return dump(mode="json", by_alias=True, exclude_none=True)
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_") and v is not None}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
