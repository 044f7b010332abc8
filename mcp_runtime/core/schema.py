"""
JSON Schema helpers shared by tools and prompts

Module: core.schema
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - InputSchema normalizing short and full schema forms
  - validate_arguments() raising ValidationError (-32602)

ARCHITECTURE:
Capabilities declare their parameters either as a full JSON Schema
({"type": "object", "properties": ..., "required": [...]}) or in the
short form used by decorators ({"x": {"type": "number"}}).
InputSchema.create() accepts both and to_dict() always returns the full
form, which is what jsonschema validates against and what clients see.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import SchemaError
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate

from .errors import ValidationError

logger = logging.getLogger("core.schema")

def _is_full_schema(schema: Dict[str, Any]) -> bool:
    if isinstance(schema.get("type"), str) or "$schema" in schema:
        return True
    properties = schema.get("properties")
    return isinstance(properties, dict) and all(
        isinstance(value, dict) for value in properties.values()
    )


@dataclass
class InputSchema:
    """JSON Schema for capability parameters"""

    properties: Dict[str, Any] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    type: str = "object"
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON Schema format"""
        schema = {
            "type": self.type,
            "properties": self.properties,
        }
        if self.required:
            schema["required"] = list(self.required)
        schema.update(self.extra)
        return schema

    @staticmethod
    def create(schema: Optional[Dict[str, Any]] = None, required: Optional[List[str]] = None):
        """
        Create InputSchema from a full schema or a properties mapping

        Args:
            schema: Full JSON Schema, or {name: property schema}
            required: Required names (short form only)

        Returns:
            InputSchema
        """
        if isinstance(schema, InputSchema):
            return schema
        schema = dict(schema or {})
        if _is_full_schema(schema):
            return InputSchema(
                properties=dict(schema.pop("properties", {})),
                required=list(schema.pop("required", required or [])),
                type=schema.pop("type", "object"),
                extra=schema,
            )
        return InputSchema(properties=schema, required=list(required or []))


def validate_arguments(
    schema: InputSchema,
    arguments: Any,
    kind: str,
    key: str,
) -> None:
    """
    Validate arguments against a capability schema

    Args:
        schema: InputSchema of the capability
        arguments: Decoded arguments
        kind: "tool" or "prompt", for messages
        key: Capability key

    Raises:
        ValidationError: With the first schema violation
    """
    try:
        validate(instance=arguments, schema=schema.to_dict())
    except JSONSchemaValidationError as e:
        path = "/".join(str(part) for part in e.absolute_path)
        location = f" at '{path}'" if path else ""
        logger.warning(f"{kind.capitalize()} '{key}' rejected arguments{location}: {e.message}")
        raise ValidationError(
            f"{kind.capitalize()} '{key}' validation failed{location}: {e.message}",
            data={kind: key},
        ) from e
    except SchemaError as e:
        raise ValidationError(
            f"{kind.capitalize()} '{key}' has an invalid schema: {e.message}",
            data={kind: key},
        ) from e
