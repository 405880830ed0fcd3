"""Higgsfield API client for image and video generation.

This module provides an async HTTP client for the Higgsfield platform.
Submissions are retried with linear backoff on transient network failures
(any httpx transport error); error responses are not retried. Whatever
shape the provider answers with, the client resolves it to a single
``MediaResult`` or raises a typed ``MediaGenerationError``.

Example usage:
    >>> from reeltrack.config import HiggsfieldConfig
    >>> config = HiggsfieldConfig(credentials="key-id:key-secret")
    >>> async with HiggsfieldClient(config) as client:
    ...     result = await client.generate_image(ImageGenerationRequest(prompt="a red fox"))
    >>> result.url
"""

from __future__ import annotations

import asyncio
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from reeltrack.config import HiggsfieldConfig
from reeltrack.generation.errors import (
    MissingCredentialsError,
    ProviderFailedError,
    UpstreamUnavailableError,
)
from reeltrack.generation.polling import (
    GenerationJob,
    JobPoller,
    MediaKind,
    MediaResult,
    Sleeper,
)
from reeltrack.generation.shapes import StatusSnapshot, decode_status
from reeltrack.logging import get_logger

logger = get_logger(__name__)

AspectRatio = Literal["9:16", "16:9", "1:1", "4:3", "3:4"]
Resolution = Literal["720p", "1080p", "4k"]
VideoModel = Literal["dop-turbo", "dop-standard", "dop-lite"]

# any failure to get a response back, whatever the cause
TRANSIENT_ERRORS = (httpx.TransportError,)


class ImageGenerationRequest(BaseModel):
    """Options for a text-to-image generation."""

    model_config = ConfigDict(extra="forbid")

    prompt: str = Field(..., min_length=1)
    aspect_ratio: AspectRatio = "9:16"
    resolution: Resolution = "720p"
    batch_size: int = Field(default=1, ge=1, le=4)
    enhance_prompt: bool = True
    style_strength: float = Field(default=1.0, ge=0.0, le=1.0)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class VideoGenerationRequest(BaseModel):
    """Options for an image-to-video generation."""

    model_config = ConfigDict(extra="forbid")

    image_url: str = Field(..., min_length=1)
    prompt: str = "Cinematic camera movement"
    model: VideoModel = "dop-turbo"
    duration: int = Field(default=5, ge=1, le=30)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


def _error_message(response: httpx.Response) -> str:
    fallback = f"API request failed with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or fallback


class HiggsfieldClient:
    """Async client for the Higgsfield generation API.

    Can be used as an async context manager or held for the lifetime of
    the application and closed explicitly.

    Attributes:
        config: Higgsfield configuration (credentials, endpoints, retry and poll settings)
    """

    def __init__(
        self,
        config: HiggsfieldConfig,
        *,
        sleep: Sleeper = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if config.resolve_credentials() is None:
            logger.warning("higgsfield_credentials_missing")
        else:
            logger.info("higgsfield_client_initialized", base_url=config.base_url)

    async def __aenter__(self) -> HiggsfieldClient:
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def configured(self) -> bool:
        return self.config.resolve_credentials() is not None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.request_timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        credentials = self.config.resolve_credentials()
        if credentials is None:
            raise MissingCredentialsError(
                "Higgsfield credentials not configured. Set REELTRACK_HIGGSFIELD__API_KEY "
                "and REELTRACK_HIGGSFIELD__API_SECRET, or REELTRACK_HIGGSFIELD__CREDENTIALS."
            )
        key, secret = credentials
        return {"hf-api-key": key, "hf-secret": secret}

    async def submit(self, path: str, body: dict[str, Any]) -> Any:
        """POST a generation request, retrying transient network failures.

        Waits ``attempt * backoff_seconds`` between attempts; there is no
        wait after the final attempt.

        Args:
            path: Endpoint path relative to the base URL
            body: JSON request body

        Returns:
            Decoded JSON body of the provider response.

        Raises:
            MissingCredentialsError: If no credentials are configured
            ProviderFailedError: If the provider answers with an error status
            UpstreamUnavailableError: If every attempt failed transiently, or the
                request failed in a way that is not retried
        """
        headers = self._headers()
        client = self._get_client()
        max_attempts = self.config.max_submit_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                logger.debug(
                    "higgsfield_submit_attempt",
                    path=path,
                    attempt=attempt,
                    max_attempts=max_attempts,
                )
                response = await client.post(path, json=body, headers=headers)
            except TRANSIENT_ERRORS as e:
                if attempt < max_attempts:
                    backoff = attempt * self.config.backoff_seconds
                    logger.warning(
                        "higgsfield_submit_retry",
                        path=path,
                        attempt=attempt,
                        backoff_seconds=backoff,
                        error=str(e) or type(e).__name__,
                    )
                    await self._sleep(backoff)
                    continue
                logger.error(
                    "higgsfield_submit_exhausted",
                    path=path,
                    attempts=max_attempts,
                    error=str(e) or type(e).__name__,
                )
                raise UpstreamUnavailableError(
                    f"Higgsfield unreachable after {max_attempts} attempts: {e or type(e).__name__}",
                    attempts=max_attempts,
                ) from e
            except httpx.HTTPError as e:
                # decoding and redirect failures are not retried
                logger.error(
                    "higgsfield_submit_failed",
                    path=path,
                    attempt=attempt,
                    error=str(e) or type(e).__name__,
                )
                raise UpstreamUnavailableError(
                    f"Higgsfield request failed: {e or type(e).__name__}",
                    attempts=attempt,
                ) from e

            if not response.is_success:
                message = _error_message(response)
                logger.error(
                    "higgsfield_api_error",
                    path=path,
                    status_code=response.status_code,
                    error=message[:200],
                )
                raise ProviderFailedError(message, status_code=response.status_code)

            try:
                return response.json()
            except ValueError as e:
                raise ProviderFailedError(
                    "Higgsfield returned a non-JSON response",
                    status_code=response.status_code,
                ) from e

        # Unreachable with max_attempts >= 1, kept for the type checker
        raise UpstreamUnavailableError("Higgsfield submission loop exited", attempts=max_attempts)

    async def fetch_status(self, request_id: str) -> Any:
        """Fetch the raw status payload of a queued request.

        Raises:
            httpx.HTTPStatusError: On an error status
            httpx.HTTPError: On network or decoding failure
        """
        client = self._get_client()
        response = await client.get(f"/requests/{request_id}/status", headers=self._headers())
        response.raise_for_status()
        try:
            return response.json()
        except ValueError:
            # decodes as an unknown status, so polling carries on
            return None

    def _poller(self, max_attempts: int) -> JobPoller:
        return JobPoller(
            self.fetch_status,
            interval_seconds=self.config.poll_interval_seconds,
            max_attempts=max_attempts,
            sleep=self._sleep,
        )

    async def generate_image(self, request: ImageGenerationRequest) -> MediaResult:
        """Generate an image and wait for its URL."""
        payload = request.to_payload()
        logger.info(
            "image_generation_started",
            prompt_preview=request.prompt[:100],
            aspect_ratio=request.aspect_ratio,
            resolution=request.resolution,
        )
        job = GenerationJob(kind=MediaKind.image, payload=payload)
        submission = await self.submit(self.config.image_endpoint, payload)
        return await self._poller(self.config.image_max_poll_attempts).resolve(job, submission)

    async def generate_video(self, request: VideoGenerationRequest) -> MediaResult:
        """Animate an image into a video and wait for its URL."""
        payload = request.to_payload()
        logger.info(
            "video_generation_started",
            image_url=request.image_url,
            model=request.model,
            duration=request.duration,
        )
        job = GenerationJob(kind=MediaKind.video, payload=payload)
        submission = await self.submit(self.config.video_endpoint, payload)
        return await self._poller(self.config.video_max_poll_attempts).resolve(job, submission)

    async def get_job_status(self, job_id: str) -> StatusSnapshot:
        """Check a job once, without waiting for it to finish.

        Raises:
            MissingCredentialsError: If no credentials are configured
            ProviderFailedError: If the provider answers with an error status
            UpstreamUnavailableError: If the provider cannot be reached
        """
        try:
            payload = await self.fetch_status(job_id)
        except httpx.HTTPStatusError as e:
            raise ProviderFailedError(
                _error_message(e.response), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Status check failed: {e}", attempts=1) from e
        snapshot = decode_status(payload)
        logger.info("job_status_checked", job_id=job_id, status=snapshot.status.value)
        return snapshot
