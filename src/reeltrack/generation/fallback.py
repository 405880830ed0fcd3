"""Canned script content for running without a chat model.

The route layer installs a ``ScriptFallback`` and uses it only when the
generator reports that no model is configured. Any object with the same
two coroutines can stand in for ``CannedScriptWriter``.
"""

from __future__ import annotations

from typing import Protocol

from reeltrack.generation.script import PromptKind, ScriptRequest, ScriptResult
from reeltrack.models import Purpose, Tone

IMAGE_ENHANCEMENTS = (
    "high quality, detailed, cinematic lighting, professional photography, "
    "4k resolution, vibrant colors, sharp focus"
)
VIDEO_ENHANCEMENTS = (
    "smooth camera movement, professional cinematography, dynamic angles, "
    "engaging visual flow, cinematic quality"
)


class ScriptFallback(Protocol):
    """Substitute content source used when no model is configured."""

    async def generate(self, request: ScriptRequest) -> ScriptResult: ...

    async def enhance_prompt(self, prompt: str, kind: PromptKind) -> str: ...


class CannedScriptWriter:
    """Builds placeholder scripts and prompts from the request fields."""

    async def generate(self, request: ScriptRequest) -> ScriptResult:
        purpose = request.purpose.value
        tone = request.tone.value

        if request.key_phrase and request.keyword:
            activity = "learning" if request.purpose is Purpose.educational else "managing"
            call = "Stay protected" if request.keyword == "Protection" else "Stay organized"
            script = (
                f"I work hard just to stay afloat, and {activity} felt overwhelming. "
                f"{call} when it matters most, {request.key_phrase}."
            )
        else:
            parts = [f"This is a {tone} {purpose} video script."]
            if request.key_phrase:
                parts.append(request.key_phrase)
            if request.keyword:
                parts.append(f"Focus on {request.keyword}.")
            script = " ".join(parts)

        if request.purpose is Purpose.educational:
            scene = "someone learning or teaching"
        elif request.purpose is Purpose.testimonial:
            scene = "a person sharing their experience"
        else:
            scene = "a promotional scene"
        image_parts = [f"A {tone} scene showing {scene}"]
        if request.keyword:
            image_parts.append(f"emphasizing {request.keyword}")
        if request.key_phrase:
            image_parts.append(f"with the concept of {request.key_phrase}")
        image_parts.append("high quality, detailed, cinematic lighting")

        if request.tone is Tone.energetic:
            pace = "dynamic and fast-paced"
        elif request.tone is Tone.emotional:
            pace = "slow and emotional"
        else:
            pace = "professional and steady"
        style = "educational content style" if request.purpose is Purpose.educational else "engaging visual style"

        return ScriptResult(
            title=f"{purpose.capitalize()} {tone.capitalize()} Video",
            script=script.strip(),
            image_prompt=", ".join(image_parts),
            video_prompt=f"Smooth camera movement, {pace}, {style}",
        )

    async def enhance_prompt(self, prompt: str, kind: PromptKind) -> str:
        enhancements = IMAGE_ENHANCEMENTS if kind is PromptKind.image else VIDEO_ENHANCEMENTS
        return f"{prompt}, {enhancements}"
