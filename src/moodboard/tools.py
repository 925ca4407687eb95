"""Tool schema definitions and structural argument validation.

Each tool is declared once as a ``ToolDef``. The same definition produces the
MCP ``Tool`` descriptor returned by ``tools/list`` and drives
``validate_arguments``, which runs before any handler body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mcp.types import Tool, ToolAnnotations

from moodboard.descriptions import get_tool_description, get_tool_title
from moodboard.errors import ValidationError
from moodboard.primitives import PRIMITIVE_TOPICS
from moodboard.resources import RESOURCE_URI_META_KEY, UI_RESOURCES


@dataclass(frozen=True)
class ParameterDef:
    """Definition for a JSON Schema parameter."""

    type: str  # "string", "integer", "boolean"
    description: str
    default: Any = None
    enum: tuple[str, ...] | None = None
    minimum: int | None = None
    maximum: int | None = None
    min_length: int | None = None


@dataclass(frozen=True)
class ToolDef:
    """Definition for an MCP tool."""

    name: str
    parameters: tuple[tuple[str, ParameterDef], ...]  # Ordered (name, param) pairs
    required: tuple[str, ...] = ()
    annotations: dict[str, bool] = field(default_factory=dict)
    meta: dict[str, Any] | None = None


# =============================================================================
# Parameter definitions
# =============================================================================

SUBJECT_PARAM = ParameterDef(
    type="string",
    description="The feeling or concept to visualize (e.g., peace, chaos, energy, curiosity)",
    min_length=1,
)

INTENSITY_PARAM = ParameterDef(
    type="integer",
    description="Scale from 1-10 of how many objects to generate (default: 5)",
    default=5,
    minimum=1,
    maximum=10,
)

SIZE_PARAM = ParameterDef(
    type="integer",
    description="Height in pixels for the 3D canvas (default: 600)",
    default=600,
    minimum=1,
)

TOPIC_PARAM = ParameterDef(
    type="string",
    description="Category of documentation to retrieve (default: all)",
    default="all",
    enum=PRIMITIVE_TOPICS,
)


# =============================================================================
# Tool definitions
# =============================================================================

GENERATE_MOOD_SCENE_TOOL = ToolDef(
    name="generate_mood_scene",
    parameters=(
        ("subject", SUBJECT_PARAM),
        ("intensity", INTENSITY_PARAM),
        ("size", SIZE_PARAM),
    ),
    required=("subject",),
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": False,  # Generated code varies between calls
        "openWorldHint": False,
    },
    meta={RESOURCE_URI_META_KEY: UI_RESOURCES["moodboard"].uri},
)

LEARN_MOOD_PRIMITIVES_TOOL = ToolDef(
    name="learn_mood_primitives",
    parameters=(("topic", TOPIC_PARAM),),
    required=(),
)

TOOL_DEFS: tuple[ToolDef, ...] = (GENERATE_MOOD_SCENE_TOOL, LEARN_MOOD_PRIMITIVES_TOOL)


# =============================================================================
# Schema generation
# =============================================================================


def _param_to_schema(param: ParameterDef) -> dict[str, Any]:
    """Convert a ParameterDef to a JSON Schema dict."""
    schema: dict[str, Any] = {"type": param.type}

    if param.description:
        schema["description"] = param.description
    if param.default is not None:
        schema["default"] = param.default
    if param.enum is not None:
        schema["enum"] = list(param.enum)
    if param.minimum is not None:
        schema["minimum"] = param.minimum
    if param.maximum is not None:
        schema["maximum"] = param.maximum
    if param.min_length is not None:
        schema["minLength"] = param.min_length

    return schema


def build_input_schema(tool: ToolDef) -> dict[str, Any]:
    """Convert a ToolDef to an MCP ``inputSchema`` dict."""
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {name: _param_to_schema(param) for name, param in tool.parameters},
    }
    if tool.required:
        schema["required"] = list(tool.required)
    return schema


def build_tool(tool: ToolDef) -> Tool:
    """Build the MCP ``Tool`` descriptor for ``tool``."""
    extra: dict[str, Any] = {}
    if tool.meta is not None:
        extra["_meta"] = dict(tool.meta)
    return Tool(
        name=tool.name,
        title=get_tool_title(tool.name),
        description=get_tool_description(tool.name),
        inputSchema=build_input_schema(tool),
        annotations=ToolAnnotations(**tool.annotations) if tool.annotations else None,
        **extra,
    )


# =============================================================================
# Argument validation
# =============================================================================


def _coerce(name: str, param: ParameterDef, value: Any) -> Any:
    if param.type == "string":
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be a string")
        if param.min_length is not None and len(value.strip()) < param.min_length:
            if param.min_length == 1:
                raise ValidationError(f"{name} cannot be empty")
            raise ValidationError(f"{name} must be at least {param.min_length} characters")
    elif param.type == "integer":
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer")
        if param.minimum is not None and value < param.minimum:
            raise ValidationError(_range_message(name, param))
        if param.maximum is not None and value > param.maximum:
            raise ValidationError(_range_message(name, param))
    elif param.type == "boolean":
        if not isinstance(value, bool):
            raise ValidationError(f"{name} must be a boolean")

    if param.enum is not None and value not in param.enum:
        allowed = ", ".join(param.enum)
        raise ValidationError(f"{name} must be one of: {allowed}")
    return value


def _range_message(name: str, param: ParameterDef) -> str:
    if param.maximum is None:
        return f"{name} must be >= {param.minimum}"
    if param.minimum is None:
        return f"{name} must be <= {param.maximum}"
    return f"{name} must be between {param.minimum} and {param.maximum}"


def validate_arguments(tool: ToolDef, arguments: dict[str, Any] | None) -> dict[str, Any]:
    """Check ``arguments`` against ``tool`` and return them with defaults applied.

    Unknown keys are dropped. ``None`` counts as absent.

    Raises:
        ValidationError: On a missing required field, wrong type, or a value
            outside the declared range or enum.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValidationError("arguments must be an object")

    validated: dict[str, Any] = {}
    for name, param in tool.parameters:
        value = arguments.get(name)
        if value is None:
            if name in tool.required:
                raise ValidationError(f"{name} is required")
            if param.default is not None:
                validated[name] = param.default
            continue
        validated[name] = _coerce(name, param, value)
    return validated


__all__ = [
    "GENERATE_MOOD_SCENE_TOOL",
    "LEARN_MOOD_PRIMITIVES_TOOL",
    "ParameterDef",
    "TOOL_DEFS",
    "ToolDef",
    "build_input_schema",
    "build_tool",
    "validate_arguments",
]
