"""Tests for prompt templates and the primitives reference."""

import pytest

from moodboard.errors import NotFoundError, ValidationError
from moodboard.primitives import PRIMITIVE_TOPICS, primitives_documentation
from moodboard.prompts import PROMPTS, parse_intensity, render_prompt


class TestParseIntensity:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, 5),
            ("", 5),
            ("  ", 5),
            ("abc", 5),
            ("0", 5),
            ("3", 3),
            (" 7 ", 7),
            ("15", 10),
            ("-4", 1),
            ("7.5", 7),
            ("3 objects", 3),
            ("  +8", 8),
            ("objects: 3", 5),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_intensity(raw) == expected


class TestRenderPrompt:
    def test_renders_user_message(self):
        result = render_prompt("visualize-feeling", {"subject": " wonder ", "intensity": "8"})

        assert len(result.messages) == 1
        message = result.messages[0]
        assert message.role == "user"
        assert 'feeling: "wonder" with intensity 8' in message.content.text
        assert "generate_mood_scene" in message.content.text

    def test_default_intensity(self):
        result = render_prompt("visualize-feeling", {"subject": "calm"})
        assert "intensity 5" in result.messages[0].content.text

    @pytest.mark.parametrize("arguments", [None, {}, {"subject": "   "}])
    def test_subject_required(self, arguments):
        with pytest.raises(ValidationError, match="subject is required"):
            render_prompt("visualize-feeling", arguments)

    def test_unknown_prompt(self):
        with pytest.raises(NotFoundError, match="Unknown prompt: haiku"):
            render_prompt("haiku", {"subject": "calm"})

    def test_prompt_catalog(self):
        assert [prompt.name for prompt in PROMPTS] == ["visualize-feeling"]
        required = {arg.name: arg.required for arg in PROMPTS[0].arguments}
        assert required == {"subject": True, "intensity": False}


class TestPrimitivesDocumentation:
    @pytest.mark.parametrize("topic", [t for t in PRIMITIVE_TOPICS if t != "all"])
    def test_all_contains_every_section(self, topic):
        assert primitives_documentation(topic) in primitives_documentation("all")

    def test_default_is_all(self):
        assert primitives_documentation() == primitives_documentation("all")
