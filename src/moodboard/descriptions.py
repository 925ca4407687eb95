"""Tool titles, descriptions, and the server instructions sent on initialize."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ToolMetadata:
    """Four-part tool description plus usage examples."""

    title: str
    purpose: str
    returns: str
    use_case: str
    constraints: str
    examples: tuple[tuple[str, str], ...] = ()

    @property
    def description(self) -> str:
        text = f"{self.purpose} {self.returns} {self.use_case} {self.constraints}"
        if self.examples:
            listed = "; ".join(f'"{query}" -> {action}' for query, action in self.examples)
            text = f"{text} Examples: {listed}."
        return text


TOOL_METADATA: dict[str, ToolMetadata] = {
    "generate_mood_scene": ToolMetadata(
        title="Generate Mood Scene",
        purpose=(
            "Generates dynamic Three.js code for abstract 3D art installations "
            "based on an emotion or abstract concept."
        ),
        returns=(
            "Returns JavaScript code for a Three.js scene with geometries, materials, "
            "lighting, and animation, plus the subject and canvas size."
        ),
        use_case=(
            "Use this when the user wants to visualize an emotion, feeling, or abstract "
            "concept as an interactive 3D art installation."
        ),
        constraints=(
            "Note: The code is executed in a sandboxed canvas with OrbitControls. "
            "Intensity ranges from 1-10 and affects object count. Higher intensity may "
            "impact performance on mobile devices."
        ),
        examples=(
            ("Visualize peace", "Generate a calming scene with floating spheres and soft blue colors"),
            ("Show chaos", "Generate an intense scene with sharp geometries and high-contrast colors"),
            ("Express energy", "Generate a dynamic scene with vibrant colors and rapid animations"),
        ),
    ),
    "learn_mood_primitives": ToolMetadata(
        title="Learn Mood Primitives",
        purpose=(
            "Retrieves documentation and code examples for abstract visual techniques "
            "available in the Three.js widget."
        ),
        returns=(
            "Returns Markdown-formatted documentation covering geometries, materials, "
            "lighting effects, and animation patterns with code snippets."
        ),
        use_case=(
            "Use this to understand available Three.js primitives before generating a "
            "scene, or to learn specific techniques for visual effects."
        ),
        constraints=(
            "Note: This is a documentation-only tool with no visual output. "
            "Use generate_mood_scene to create actual scenes."
        ),
        examples=(
            ("Learn geometries", "Get documentation on available Three.js geometry types"),
            ("Learn materials", "Get documentation on material types and their properties"),
            ("Learn all techniques", "Get comprehensive documentation on all visual techniques"),
        ),
    ),
}


def get_tool_description(tool_name: str) -> str:
    """Return the joined four-part description for ``tool_name``.

    Raises:
        KeyError: If the tool has no metadata entry.
    """
    return TOOL_METADATA[tool_name].description


def get_tool_title(tool_name: str) -> str:
    return TOOL_METADATA[tool_name].title


CREATIVE_GUIDELINES = """\
- **Peace/Serenity**: Soft blue/teal colors (#7ec8e3), floating spheres, slow easing animations
- **Energy/Excitement**: Vibrant reds/oranges, sharp geometries (Icosahedrons, Octahedrons), rapid movement
- **Chaos/Intensity**: High-contrast colors, random particle positions, glitch-like motion, multiple materials
- **Curiosity/Wonder**: Gradients, nested shapes, gentle pulsing effects, emissive materials
- **Joy/Happiness**: Bright yellows and pinks, bouncing animations, rounded shapes
- **Melancholy/Sadness**: Deep blues and purples, slow falling particles, fog effects"""

SERVER_INSTRUCTIONS = f"""\
3D Abstract Moodboard - Generate interactive Three.js art installations from emotional prompts.

## Available Tools

### generate_mood_scene
Generates dynamic Three.js code for abstract 3D art installations based on an emotion or concept.
- Input: subject (required), intensity (1-10, optional), size (canvas height in pixels, optional)
- Output: Three.js JavaScript code executed in the widget
- Widget: Displays interactive 3D scene with OrbitControls for exploration

### learn_mood_primitives
Get documentation and examples for abstract visual techniques in Three.js.
- Input: topic (geometries, materials, lighting, animation, or all)
- Output: Markdown documentation with code examples

## Creative Guidelines

When generating scenes, follow these emotional mappings:

{CREATIVE_GUIDELINES}

## Technical Constraints

- Keep light intensity <= 1 to avoid overexposure
- Use UnrealBloomPass for glowing "neon" effects
- Use MeshStandardMaterial for realistic lighting interactions
- Always set renderer.setClearColor() to a dark background (0x1a1a2e recommended)
- Always include OrbitControls to allow user exploration
- Use requestAnimationFrame for smooth animations

## Example Queries

"Visualize serenity" -> generate_mood_scene(subject: "serenity", intensity: 3)
"Show me chaos" -> generate_mood_scene(subject: "chaos", intensity: 8)
"What geometries can I use?" -> learn_mood_primitives(topic: "geometries")

## Limitations

- No persistent scene storage (scenes are generated on the fly)
- Complex scenes (intensity > 8) may affect performance on mobile devices"""
