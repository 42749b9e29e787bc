"""Schema transformation utilities for MCP tool descriptions.

Pydantic's JSON schema carries details that tool clients do not need or
handle poorly:
1. Every model and field gets a generated 'title'
2. Optional fields become anyOf [<type>, null] with 'default: null'

This module turns a model schema into the flat shape advertised as a tool's
inputSchema, keeping type, description, default, minimum and maximum.
"""

import copy
import logging
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def tool_input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """
    Build an MCP tool inputSchema from a pydantic model.

    Args:
        model: Pydantic model describing the tool arguments

    Returns:
        JSON schema object with 'type', 'properties' and 'required'
    """
    schema = _clean_schema_node(copy.deepcopy(model.model_json_schema()))
    schema.setdefault("required", [])
    return schema


def _clean_schema_node(schema: dict[str, Any]) -> dict[str, Any]:
    """
    Clean a single schema node (recursive helper for tool_input_schema).

    Handles:
    - Nullable types (anyOf with a single type and null)
    - Generated titles
    - 'default: null' left behind by optional fields
    """
    if not isinstance(schema, dict):
        return schema

    # Nullable non-$ref type - flatten to the non-null branch
    if "anyOf" in schema:
        any_of_types = schema["anyOf"]
        non_null_types = [t for t in any_of_types if t.get("type") != "null"]
        has_null = len(non_null_types) < len(any_of_types)

        if has_null and len(non_null_types) == 1 and "$ref" not in non_null_types[0]:
            result = {key: value for key, value in schema.items() if key != "anyOf"}
            result.update(non_null_types[0])
            logger.debug(f"Flattened nullable field of type {result.get('type')}")
            schema = result

    schema.pop("title", None)
    if "default" in schema and schema["default"] is None:
        del schema["default"]

    if isinstance(schema.get("properties"), dict):
        schema["properties"] = {
            name: _clean_schema_node(prop) for name, prop in schema["properties"].items()
        }

    return schema
