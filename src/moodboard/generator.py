"""Scene-code generation through an OpenAI-compatible chat completions API.

The generated JavaScript is treated as an opaque string: it is cleaned of
markdown fences and relayed to the client, never evaluated here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from moodboard.descriptions import CREATIVE_GUIDELINES
from moodboard.errors import GenerationError

logger = logging.getLogger("moodboard.generator")

GenerateFn = Callable[[str, int], Awaitable[str]]

DEFAULT_MODEL = "@cf/meta/llama-3.3-70b-instruct-fp8-fast"
DEFAULT_TIMEOUT_SECONDS = 60.0

_FENCE_PREFIXES = ("```javascript", "```js", "```")


def object_count(intensity: int) -> int:
    """Rough number of scene objects requested for an intensity of 1-10."""
    return 5 + intensity * 2


def build_system_prompt(intensity: int) -> str:
    return f"""You are an expert Three.js developer creating abstract art installations.
Your code will be executed in a sandboxed environment with these globals:
- THREE (Three.js library r181)
- canvas (pre-created canvas element)
- width, height (canvas dimensions)
- OrbitControls (for camera controls)
- EffectComposer, RenderPass, UnrealBloomPass (for post-processing)

REQUIREMENTS:
1. Create a complete, self-contained scene
2. Always include OrbitControls for user exploration
3. Use requestAnimationFrame for animations
4. Set renderer.setClearColor() to a dark color
5. Keep light intensity <= 1
6. Use MeshStandardMaterial for most objects
7. The intensity parameter {intensity}/10 means include roughly {object_count(intensity)} objects

EMOTIONAL MAPPINGS:
{CREATIVE_GUIDELINES}

Return ONLY executable JavaScript code. No markdown, no explanations, no code blocks."""


def build_user_prompt(subject: str, intensity: int) -> str:
    return f"""Generate Three.js code for the emotion: "{subject}" with intensity {intensity}/10.

The scene should visually represent the feeling of "{subject}" using abstract 3D shapes, \
appropriate colors, lighting, and animations.

Remember:
- Include OrbitControls for camera manipulation
- Use appropriate colors and shapes for the emotion
- Add smooth animations that reinforce the mood
- Keep code clean and efficient"""


def cleanup_code(code: str) -> str:
    """Strip a surrounding markdown code fence, if any."""
    cleaned = code.strip()
    for prefix in _FENCE_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix) :]
            break
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _extract_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise GenerationError("Unexpected response from generation service")
    # Workers AI native shape.
    response = payload.get("response")
    if isinstance(response, str):
        return response
    result = payload.get("result")
    if isinstance(result, dict) and isinstance(result.get("response"), str):
        return result["response"]
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str):
            return content
    raise GenerationError("Generation service returned no content")


class ChatCompletionsGenerator:
    """Calls ``{base_url}/chat/completions`` and returns cleaned scene code.

    Args:
        base_url: API root, e.g. ``https://api.openai.com/v1`` or a Workers AI
            account endpoint.
        api_key: Bearer token for the API. Optional for local endpoints.
        model: Model identifier.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_payload(self, subject: str, intensity: int) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(intensity)},
                {"role": "user", "content": build_user_prompt(subject, intensity)},
            ],
        }

    async def __call__(self, subject: str, intensity: int) -> str:
        url = f"{self.base_url}/chat/completions"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    json=self.build_payload(subject, intensity),
                    headers=self._headers(),
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            raise GenerationError(f"Generation timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise GenerationError(
                f"Generation request failed: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GenerationError(f"Generation request failed: {exc}") from exc
        except ValueError as exc:
            raise GenerationError("Generation service returned invalid JSON") from exc

        code = cleanup_code(_extract_text(payload))
        if not code:
            raise GenerationError("Generation service returned empty code")
        logger.debug("Generated %d chars of scene code for %r", len(code), subject)
        return code


async def unconfigured_generator(subject: str, intensity: int) -> str:
    """Stand-in used when no generation endpoint is configured."""
    raise GenerationError("Scene generation is not configured (set MOODBOARD_AI_BASE_URL)")


__all__ = [
    "ChatCompletionsGenerator",
    "DEFAULT_MODEL",
    "GenerateFn",
    "build_system_prompt",
    "build_user_prompt",
    "cleanup_code",
    "object_count",
    "unconfigured_generator",
]
