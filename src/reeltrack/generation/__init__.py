"""Generation proxies for Reeltrack.

This package wraps the two external services the application depends on:
a chat-completion model for scripts and prompt enhancement, and the
Higgsfield API for image and video generation with polling.
"""

from __future__ import annotations

from reeltrack.generation.errors import (
    GenerationTimeoutError,
    MalformedResponseError,
    MediaGenerationError,
    MissingCredentialsError,
    ProviderFailedError,
    ProviderRejectedError,
    UpstreamUnavailableError,
)
from reeltrack.generation.fallback import CannedScriptWriter, ScriptFallback
from reeltrack.generation.higgsfield import (
    HiggsfieldClient,
    ImageGenerationRequest,
    VideoGenerationRequest,
)
from reeltrack.generation.llm_client import ChatCompletionClient
from reeltrack.generation.polling import GenerationJob, JobPoller, JobState, MediaKind, MediaResult
from reeltrack.generation.script import (
    GenerationError,
    GeneratorUnavailableError,
    PromptKind,
    ScriptGenerator,
    ScriptRequest,
    ScriptResult,
)

__all__ = [
    # Script generation
    "CannedScriptWriter",
    "ChatCompletionClient",
    "GenerationError",
    "GeneratorUnavailableError",
    "PromptKind",
    "ScriptFallback",
    "ScriptGenerator",
    "ScriptRequest",
    "ScriptResult",
    # Media generation
    "GenerationJob",
    "GenerationTimeoutError",
    "HiggsfieldClient",
    "ImageGenerationRequest",
    "JobPoller",
    "JobState",
    "MalformedResponseError",
    "MediaGenerationError",
    "MediaKind",
    "MediaResult",
    "MissingCredentialsError",
    "ProviderFailedError",
    "ProviderRejectedError",
    "UpstreamUnavailableError",
    "VideoGenerationRequest",
]
