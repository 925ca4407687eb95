"""Prompt templates offered through prompts/list and prompts/get."""

from __future__ import annotations

import re

from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

from moodboard.errors import NotFoundError, ValidationError

DEFAULT_INTENSITY = 5

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

VISUALIZE_FEELING = Prompt(
    name="visualize-feeling",
    title="Visualize a Feeling",
    description=(
        "Converts your current mood or a specific abstract concept into a unique "
        "3D art installation."
    ),
    arguments=[
        PromptArgument(
            name="subject",
            description="The feeling you want to see (e.g., peace, curiosity, tension)",
            required=True,
        ),
        PromptArgument(
            name="intensity",
            description="Scale from 1-10 of how many objects to generate",
            required=False,
        ),
    ],
)

PROMPTS: tuple[Prompt, ...] = (VISUALIZE_FEELING,)


def parse_intensity(raw: str | None) -> int:
    """Parse a free-form intensity argument, clamped to 1-10 (default 5).

    Only the leading integer is read, so ``"7.5"`` gives 7 and ``"3 objects"``
    gives 3. Input with no leading integer falls back to the default.
    """
    if raw is None:
        return DEFAULT_INTENSITY
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return DEFAULT_INTENSITY
    value = int(match.group(0))
    if value == 0:
        return DEFAULT_INTENSITY
    return min(10, max(1, value))


def render_prompt(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    """Render prompt ``name`` with ``arguments``.

    Raises:
        NotFoundError: Unknown prompt name.
        ValidationError: ``subject`` missing or blank.
    """
    if name != VISUALIZE_FEELING.name:
        raise NotFoundError(f"Unknown prompt: {name}")
    arguments = arguments or {}
    subject = str(arguments.get("subject") or "").strip()
    if not subject:
        raise ValidationError("subject is required")
    intensity = parse_intensity(arguments.get("intensity"))
    text = (
        f"Please use the 'generate_mood_scene' tool to create a 3D visualization of the "
        f'feeling: "{subject}" with intensity {intensity}. After generating, explain what '
        "visual elements were used to represent this emotion."
    )
    return GetPromptResult(
        description=VISUALIZE_FEELING.description,
        messages=[PromptMessage(role="user", content=TextContent(type="text", text=text))],
    )


__all__ = ["PROMPTS", "VISUALIZE_FEELING", "parse_intensity", "render_prompt"]
