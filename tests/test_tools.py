"""Tests for the tools module."""

import pytest

from moodboard.descriptions import TOOL_METADATA, get_tool_description, get_tool_title
from moodboard.errors import ValidationError
from moodboard.resources import RESOURCE_URI_META_KEY, UI_RESOURCES
from moodboard.tools import (
    GENERATE_MOOD_SCENE_TOOL,
    LEARN_MOOD_PRIMITIVES_TOOL,
    TOOL_DEFS,
    ParameterDef,
    ToolDef,
    _param_to_schema,
    build_input_schema,
    build_tool,
    validate_arguments,
)


class TestParameterDefToSchema:
    """Tests for _param_to_schema conversion."""

    def test_string_param_with_description(self):
        """String parameter with description converts correctly."""
        param = ParameterDef(type="string", description="A test string parameter")

        assert _param_to_schema(param) == {
            "type": "string",
            "description": "A test string parameter",
        }

    def test_integer_param_with_min_max_and_default(self):
        param = ParameterDef(
            type="integer",
            description="A bounded integer",
            default=5,
            minimum=1,
            maximum=10,
        )

        assert _param_to_schema(param) == {
            "type": "integer",
            "description": "A bounded integer",
            "default": 5,
            "minimum": 1,
            "maximum": 10,
        }

    def test_enum_param(self):
        """Enum parameter converts tuple to list."""
        param = ParameterDef(
            type="string",
            description="Choose a level",
            enum=("low", "medium", "high"),
        )

        assert _param_to_schema(param)["enum"] == ["low", "medium", "high"]

    def test_min_length_becomes_min_length_keyword(self):
        param = ParameterDef(type="string", description="Name", min_length=1)

        assert _param_to_schema(param)["minLength"] == 1


class TestBuildInputSchema:
    def test_required_listed_only_when_present(self):
        tool = ToolDef(
            name="test_tool",
            parameters=(("flag", ParameterDef(type="boolean", description="Flag")),),
        )
        schema = build_input_schema(tool)

        assert schema["type"] == "object"
        assert "required" not in schema
        assert schema["properties"]["flag"]["type"] == "boolean"

    def test_generate_mood_scene_schema(self):
        schema = build_input_schema(GENERATE_MOOD_SCENE_TOOL)
        props = schema["properties"]

        assert schema["required"] == ["subject"]
        assert list(props) == ["subject", "intensity", "size"]
        assert props["subject"]["minLength"] == 1
        assert props["intensity"]["minimum"] == 1
        assert props["intensity"]["maximum"] == 10
        assert props["intensity"]["default"] == 5
        assert props["size"]["default"] == 600


class TestBuildTools:
    @pytest.fixture
    def tools(self):
        return [build_tool(tool) for tool in TOOL_DEFS]

    def test_tool_names_in_declaration_order(self, tools):
        assert [t.name for t in tools] == ["generate_mood_scene", "learn_mood_primitives"]

    def test_scene_tool_links_ui_resource(self, tools):
        scene = tools[0]
        dumped = scene.model_dump(by_alias=True, exclude_none=True)

        assert dumped["_meta"] == {RESOURCE_URI_META_KEY: UI_RESOURCES["moodboard"].uri}
        assert scene.annotations is not None
        assert scene.annotations.readOnlyHint is True
        assert scene.title

    def test_primitives_tool_topic_enum(self, tools):
        primitives = tools[1]
        props = primitives.inputSchema["properties"]

        assert "required" not in primitives.inputSchema
        assert props["topic"]["enum"] == ["geometries", "materials", "lighting", "animation", "all"]
        assert props["topic"]["default"] == "all"

    def test_descriptions_are_not_empty(self, tools):
        for tool in tools:
            assert tool.description


class TestDescriptions:
    def test_description_joins_parts_and_examples(self):
        description = get_tool_description("generate_mood_scene")

        assert description.startswith(TOOL_METADATA["generate_mood_scene"].purpose)
        assert '"Visualize peace" -> ' in description

    def test_every_tool_has_metadata(self):
        for tool in TOOL_DEFS:
            assert get_tool_title(tool.name)
            assert get_tool_description(tool.name)


class TestValidateArguments:
    def test_applies_defaults(self):
        assert validate_arguments(GENERATE_MOOD_SCENE_TOOL, {"subject": "calm"}) == {
            "subject": "calm",
            "intensity": 5,
            "size": 600,
        }

    def test_none_arguments_treated_as_empty(self):
        assert validate_arguments(LEARN_MOOD_PRIMITIVES_TOOL, None) == {"topic": "all"}

    def test_drops_unknown_keys(self):
        result = validate_arguments(LEARN_MOOD_PRIMITIVES_TOOL, {"topic": "lighting", "extra": 1})
        assert result == {"topic": "lighting"}

    def test_integral_float_accepted(self):
        result = validate_arguments(GENERATE_MOOD_SCENE_TOOL, {"subject": "joy", "intensity": 7.0})
        assert result["intensity"] == 7
        assert isinstance(result["intensity"], int)

    @pytest.mark.parametrize(
        ("arguments", "message"),
        [
            ({}, "subject is required"),
            ({"subject": None}, "subject is required"),
            ({"subject": ""}, "subject cannot be empty"),
            ({"subject": "   "}, "subject cannot be empty"),
            ({"subject": 42}, "subject must be a string"),
            ({"subject": "calm", "intensity": 0}, "intensity must be between 1 and 10"),
            ({"subject": "calm", "intensity": 11}, "intensity must be between 1 and 10"),
            ({"subject": "calm", "intensity": 2.5}, "intensity must be an integer"),
            ({"subject": "calm", "intensity": True}, "intensity must be an integer"),
            ({"subject": "calm", "intensity": "5"}, "intensity must be an integer"),
            ({"subject": "calm", "size": 0}, "size must be >= 1"),
        ],
    )
    def test_rejects_invalid_scene_arguments(self, arguments, message):
        with pytest.raises(ValidationError, match=message):
            validate_arguments(GENERATE_MOOD_SCENE_TOOL, arguments)

    def test_rejects_unknown_topic(self):
        with pytest.raises(ValidationError, match="topic must be one of"):
            validate_arguments(LEARN_MOOD_PRIMITIVES_TOOL, {"topic": "physics"})

    def test_rejects_non_object_arguments(self):
        with pytest.raises(ValidationError, match="arguments must be an object"):
            validate_arguments(GENERATE_MOOD_SCENE_TOOL, ["calm"])
