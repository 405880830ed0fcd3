"""Generation job state machine for the media proxy.

A ``GenerationJob`` moves through the states below, driven by a single
``JobPoller.resolve`` loop:

    submitted -> completed | polling | failed | rejected
    polling   -> polling | completed | failed | rejected | timed_out

completed, failed, rejected and timed_out are terminal. The poller takes
its status fetcher and sleep function as arguments, so the whole loop can
be exercised without a network or a wall clock.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, assert_never

import httpx
from pydantic import BaseModel

from reeltrack.generation.errors import (
    GenerationTimeoutError,
    MalformedResponseError,
    ProviderFailedError,
    ProviderRejectedError,
)
from reeltrack.generation.shapes import (
    DirectUrl,
    JobStatus,
    RequestId,
    StatusSnapshot,
    TerminalStatus,
    UnknownShape,
    UrlArray,
    decode_status,
    decode_submission,
)
from reeltrack.logging import get_logger

logger = get_logger(__name__)

StatusFetcher = Callable[[str], Awaitable[Any]]
Sleeper = Callable[[float], Awaitable[None]]


class MediaKind(str, enum.Enum):
    """Kind of asset a job produces."""

    image = "image"
    video = "video"


class JobState(str, enum.Enum):
    """Lifecycle state of a generation job."""

    submitted = "submitted"
    polling = "polling"
    completed = "completed"
    failed = "failed"
    rejected = "rejected"
    timed_out = "timed_out"


TERMINAL_STATES: frozenset[JobState] = frozenset(
    {JobState.completed, JobState.failed, JobState.rejected, JobState.timed_out}
)

VALID_TRANSITIONS: dict[JobState, set[JobState]] = {
    JobState.submitted: {JobState.completed, JobState.polling, JobState.failed, JobState.rejected},
    JobState.polling: {
        JobState.polling,
        JobState.completed,
        JobState.failed,
        JobState.rejected,
        JobState.timed_out,
    },
    JobState.completed: set(),
    JobState.failed: set(),
    JobState.rejected: set(),
    JobState.timed_out: set(),
}


class InvalidJobTransitionError(Exception):
    """Raised when a job is moved along an edge the state machine lacks."""

    def __init__(self, current: JobState, target: JobState) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid job transition from {current.value} to {target.value}")


class MediaResult(BaseModel):
    """Uniform result of a successful generation."""

    url: str


@dataclass
class GenerationJob:
    """One in-flight request to the media provider.

    Attributes:
        kind: Image or video
        payload: Request body that was submitted
        state: Current lifecycle state
        request_id: Provider request id, once known
        url: Asset URL, once completed
        error: Provider or poller message for failed/rejected/timed-out jobs
        polls: Number of status checks performed
    """

    kind: MediaKind
    payload: dict[str, Any] = field(default_factory=dict)
    state: JobState = JobState.submitted
    request_id: str | None = None
    url: str | None = None
    error: str | None = None
    polls: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, target: JobState) -> None:
        """Move to target, enforcing VALID_TRANSITIONS."""
        if target not in VALID_TRANSITIONS[self.state]:
            raise InvalidJobTransitionError(self.state, target)
        self.state = target


class JobPoller:
    """Drives a generation job from its submission response to a result.

    Attributes:
        fetch_status: Coroutine returning the raw status payload for a request id
        interval_seconds: Wait between status checks
        max_attempts: Status checks before the job times out
    """

    def __init__(
        self,
        fetch_status: StatusFetcher,
        *,
        interval_seconds: float = 2.0,
        max_attempts: int = 30,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.fetch_status = fetch_status
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def resolve(self, job: GenerationJob, submission: Any) -> MediaResult:
        """Resolve a job from the provider's submission payload.

        Args:
            job: Freshly submitted job
            submission: Decoded JSON body of the submission response

        Returns:
            MediaResult holding the first asset URL.

        Raises:
            MalformedResponseError: Unrecognised payload, or completed without a URL
            ProviderFailedError: Provider reported failure
            ProviderRejectedError: Provider rejected the content
            GenerationTimeoutError: Attempt ceiling reached
        """
        self.apply_submission(job, decode_submission(submission))
        if job.state is JobState.polling:
            await self._poll(job)
        return self.finalize(job)

    def apply_submission(
        self,
        job: GenerationJob,
        shape: DirectUrl | UrlArray | RequestId | TerminalStatus | UnknownShape,
    ) -> None:
        """Apply the decoded submission shape to a submitted job."""
        if isinstance(shape, UrlArray):
            job.url = shape.first
            job.transition(JobState.completed)
        elif isinstance(shape, DirectUrl):
            job.url = shape.url
            job.transition(JobState.completed)
        elif isinstance(shape, RequestId):
            job.request_id = shape.request_id
            job.transition(JobState.polling)
            logger.info("generation_job_queued", kind=job.kind.value, request_id=job.request_id)
        elif isinstance(shape, TerminalStatus):
            job.error = shape.message or f"Generation {shape.status.value}"
            job.transition(
                JobState.rejected if shape.status is JobStatus.nsfw else JobState.failed
            )
        elif isinstance(shape, UnknownShape):
            logger.error("unrecognized_submission_response", kind=job.kind.value, payload=shape.payload)
            job.error = "Unrecognized response format from API"
            job.transition(JobState.failed)
            raise MalformedResponseError(job.error)
        else:
            assert_never(shape)

    async def _poll(self, job: GenerationJob) -> None:
        assert job.request_id is not None
        for attempt in range(1, self.max_attempts + 1):
            job.polls = attempt
            try:
                payload = await self.fetch_status(job.request_id)
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code < 500:
                    job.error = f"Status check failed with status {exc.response.status_code}"
                    job.transition(JobState.failed)
                    raise ProviderFailedError(job.error, status_code=exc.response.status_code) from exc
                job.error = f"Status check failed with status {exc.response.status_code}"
                logger.warning(
                    "status_check_server_error",
                    request_id=job.request_id,
                    attempt=attempt,
                    status_code=exc.response.status_code,
                )
            except httpx.HTTPError as exc:
                job.error = f"Status check failed: {exc}"
                logger.warning(
                    "status_check_network_error",
                    request_id=job.request_id,
                    attempt=attempt,
                    error=str(exc),
                )
            else:
                snapshot = decode_status(payload)
                logger.debug(
                    "status_check",
                    request_id=job.request_id,
                    attempt=attempt,
                    status=snapshot.raw_status,
                )
                self._apply_status(job, snapshot)
                if job.is_terminal:
                    return

            if attempt < self.max_attempts:
                await self._sleep(self.interval_seconds)

        job.error = f"{job.kind.value.capitalize()} generation timed out after {self.max_attempts} attempts"
        job.transition(JobState.timed_out)

    def _apply_status(self, job: GenerationJob, snapshot: StatusSnapshot) -> None:
        if snapshot.status is JobStatus.completed:
            if snapshot.url is None:
                job.error = f"Completed but no {job.kind.value} URL found in response"
                job.transition(JobState.failed)
                raise MalformedResponseError(job.error)
            job.url = snapshot.url
            job.transition(JobState.completed)
        elif snapshot.status is JobStatus.failed:
            job.error = snapshot.message or "Generation failed"
            job.transition(JobState.failed)
        elif snapshot.status is JobStatus.nsfw:
            job.error = snapshot.message or "Generation rejected by content policy"
            job.transition(JobState.rejected)
        # queued, in_progress and unrecognised statuses keep polling

    def finalize(self, job: GenerationJob) -> MediaResult:
        """Convert a terminal job into a result or its typed error."""
        log = logger.bind(kind=job.kind.value, request_id=job.request_id, polls=job.polls)
        if job.state is JobState.completed:
            assert job.url is not None
            log.info("generation_job_completed", url=job.url)
            return MediaResult(url=job.url)
        if job.state is JobState.rejected:
            log.warning("generation_job_rejected", error=job.error)
            raise ProviderRejectedError(job.error or "Generation rejected by content policy")
        if job.state is JobState.failed:
            log.warning("generation_job_failed", error=job.error)
            raise ProviderFailedError(job.error or "Generation failed")
        if job.state is JobState.timed_out:
            log.warning("generation_job_timed_out", error=job.error)
            raise GenerationTimeoutError(job.error or "Generation timed out", attempts=job.polls)
        raise InvalidJobTransitionError(job.state, JobState.completed)
