"""Script and prompt generation through a chat-completion model.

``ScriptGenerator.generate`` renders a fixed instruction template from the
requested purpose, tone, key phrase, keyword and length, asks the model for
a strict JSON object, and returns exactly four fields: title, script,
imagePrompt and videoPrompt. ``enhance_prompt`` rewrites an image or video
prompt with more visual detail.

Nothing here decides on canned fallback content. A
``GeneratorUnavailableError`` tells the caller no model is configured, and
the caller chooses what to serve instead.
"""

from __future__ import annotations

import enum
import json
import math

from pydantic import Field, ValidationError

from reeltrack.generation.llm_client import (
    ChatClientError,
    ChatCompletionClient,
    ChatNotConfiguredError,
)
from reeltrack.logging import get_logger
from reeltrack.models import CamelModel, Purpose, Tone

logger = get_logger(__name__)

WORDS_PER_SECOND = 2.5
DURATION_SLACK_SECONDS = 5


class GenerationError(Exception):
    """Raised when the model call fails or returns unusable content."""

    pass


class GeneratorUnavailableError(GenerationError):
    """Raised when no chat model is configured."""

    pass


class PromptKind(str, enum.Enum):
    """What a prompt is used to generate."""

    image = "image"
    video = "video"


class ScriptRequest(CamelModel):
    """Inputs for script generation."""

    purpose: Purpose
    tone: Tone
    key_phrase: str | None = None
    keyword: str | None = None
    video_length: int = Field(default=15, ge=1, le=600)


class ScriptResult(CamelModel):
    """A generated script with its image and video prompts."""

    title: str
    script: str
    image_prompt: str
    video_prompt: str


def target_word_count(video_length: int) -> int:
    """Words needed to fill video_length seconds of speech, rounded half up."""
    return math.floor(video_length * WORDS_PER_SECOND + 0.5)


def duration_window(video_length: int) -> tuple[int, int]:
    """Spoken duration range, in seconds, the script should land in."""
    return video_length, video_length + DURATION_SLACK_SECONDS


def build_script_messages(request: ScriptRequest) -> list[dict[str, str]]:
    """Render the system and user messages for a script request."""
    low, high = duration_window(request.video_length)
    words = target_word_count(request.video_length)

    system_prompt = f"""You are an expert short-form video scriptwriter. Create compelling, concise scripts for social media videos.

Your scripts should:
- Be {low}-{high} seconds when spoken aloud (roughly {words} words)
- Match the {request.tone.value} tone
- Serve the {request.purpose.value} purpose
- Be emotionally engaging and authentic
- Include a clear call-to-action or takeaway

You must respond with valid JSON containing these exact fields:
{{
  "title": "A catchy project title (5-8 words)",
  "script": "The video script (2-3 sentences)",
  "imagePrompt": "A detailed prompt for AI image generation describing the scene/character",
  "videoPrompt": "A detailed prompt for AI video generation describing camera movement and actions"
}}"""

    requirements = [
        f"- Purpose: {request.purpose.value}",
        f"- Tone: {request.tone.value}",
        f"- Target duration: {request.video_length} seconds",
    ]
    if request.key_phrase:
        requirements.append(f'- Must include this key phrase: "{request.key_phrase}"')
    if request.keyword:
        requirements.append(f'- Must emphasize this keyword: "{request.keyword}"')

    user_prompt = (
        "Create a video script with these requirements:\n"
        + "\n".join(requirements)
        + "\n\nGenerate an authentic, relatable script that would work well for "
        "short-form video content. Return ONLY the JSON object."
    )

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


ENHANCE_SYSTEM_PROMPTS: dict[PromptKind, str] = {
    PromptKind.image: (
        "You are an expert at creating detailed, vivid image generation prompts. "
        "Enhance the given prompt to be more descriptive, specific, and optimized for "
        "AI image generation. Include details about lighting, composition, style, mood, "
        "and visual elements."
    ),
    PromptKind.video: (
        "You are an expert at creating detailed video generation prompts. Enhance the "
        "given prompt to include specific camera movements, scene composition, visual "
        "style, and dynamic elements."
    ),
}


def build_enhance_messages(prompt: str, kind: PromptKind) -> list[dict[str, str]]:
    """Render the messages for a prompt-enhancement request."""
    user_prompt = (
        f"Enhance this {kind.value} generation prompt to be more detailed and effective:"
        f'\n\n"{prompt}"\n\nReturn ONLY the enhanced prompt, no explanations or additional text.'
    )
    return [
        {"role": "system", "content": ENHANCE_SYSTEM_PROMPTS[kind]},
        {"role": "user", "content": user_prompt},
    ]


def parse_script_result(content: str) -> ScriptResult:
    """Parse model output into a ScriptResult.

    Raises:
        GenerationError: If the content is not a JSON object with four string fields.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise GenerationError("Model returned JSON that is not an object")
    try:
        return ScriptResult.model_validate(
            {
                "title": data.get("title"),
                "script": data.get("script"),
                "imagePrompt": data.get("imagePrompt"),
                "videoPrompt": data.get("videoPrompt"),
            },
            strict=True,
        )
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors()})
        raise GenerationError(f"Model response missing or invalid fields: {', '.join(missing)}") from e


class ScriptGenerator:
    """Generates scripts and enhanced prompts with a chat model.

    Attributes:
        chat: Chat-completion client used for every call
        enhance_temperature: Sampling temperature for prompt enhancement
    """

    def __init__(self, chat: ChatCompletionClient, enhance_temperature: float = 0.7) -> None:
        self.chat = chat
        self.enhance_temperature = enhance_temperature

    @property
    def available(self) -> bool:
        return self.chat.configured

    async def close(self) -> None:
        await self.chat.close()

    async def generate(self, request: ScriptRequest) -> ScriptResult:
        """Generate a script and prompts for the request.

        Raises:
            GeneratorUnavailableError: If no chat model is configured
            GenerationError: If the call fails or the response is unusable
        """
        logger.info(
            "script_generation_started",
            purpose=request.purpose.value,
            tone=request.tone.value,
            video_length=request.video_length,
            target_words=target_word_count(request.video_length),
        )
        try:
            content = await self.chat.complete(build_script_messages(request), json_mode=True)
        except ChatNotConfiguredError as e:
            raise GeneratorUnavailableError(str(e)) from e
        except ChatClientError as e:
            logger.error("script_generation_failed", error=str(e))
            raise GenerationError(str(e)) from e

        result = parse_script_result(content)
        logger.info("script_generated", title=result.title, script_length=len(result.script))
        return result

    async def enhance_prompt(self, prompt: str, kind: PromptKind = PromptKind.image) -> str:
        """Return a more detailed version of an image or video prompt.

        Raises:
            GeneratorUnavailableError: If no chat model is configured
            GenerationError: If the call fails or returns nothing
        """
        try:
            content = await self.chat.complete(
                build_enhance_messages(prompt, kind),
                temperature=self.enhance_temperature,
            )
        except ChatNotConfiguredError as e:
            raise GeneratorUnavailableError(str(e)) from e
        except ChatClientError as e:
            logger.error("prompt_enhancement_failed", kind=kind.value, error=str(e))
            raise GenerationError(str(e)) from e

        enhanced = content.strip().strip('"').strip()
        if not enhanced:
            raise GenerationError("No enhanced prompt received")
        logger.info("prompt_enhanced", kind=kind.value, length=len(enhanced))
        return enhanced
