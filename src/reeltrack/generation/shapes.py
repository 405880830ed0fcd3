"""Decoding of Higgsfield response payloads.

The provider answers a submission in several shapes: a list of asset
URLs, a single URL, a request id to poll, or an immediate terminal status.
``decode_submission`` turns a raw JSON payload into exactly one variant of
``SubmissionShape`` so callers can dispatch exhaustively instead of
probing optional keys. Status-check payloads decode to ``StatusSnapshot``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union


class JobStatus(str, enum.Enum):
    """Status values reported by the provider for a queued request."""

    queued = "queued"
    in_progress = "in_progress"
    completed = "completed"
    failed = "failed"
    nsfw = "nsfw"
    unknown = "unknown"


@dataclass(frozen=True)
class DirectUrl:
    """Payload carried one asset URL (``url``, ``image_url`` or ``video.url``)."""

    url: str


@dataclass(frozen=True)
class UrlArray:
    """Payload carried a non-empty list of asset URLs."""

    urls: tuple[str, ...]

    @property
    def first(self) -> str:
        return self.urls[0]


@dataclass(frozen=True)
class RequestId:
    """Payload only identified a queued request that must be polled."""

    request_id: str


@dataclass(frozen=True)
class TerminalStatus:
    """Payload reported failure or a content-policy rejection outright."""

    status: JobStatus
    message: str | None


@dataclass(frozen=True)
class UnknownShape:
    """Payload matched none of the known shapes."""

    payload: Any


SubmissionShape = Union[DirectUrl, UrlArray, RequestId, TerminalStatus, UnknownShape]


@dataclass(frozen=True)
class StatusSnapshot:
    """One decoded status-check response.

    Attributes:
        status: Provider status, ``unknown`` for unrecognised values
        url: First asset URL present in the payload, if any
        message: Provider message, if any
        raw_status: Status string exactly as the provider sent it
    """

    status: JobStatus
    url: str | None
    message: str | None
    raw_status: str | None

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.completed, JobStatus.failed, JobStatus.nsfw)


def _item_url(item: Any) -> str | None:
    if isinstance(item, str):
        return item or None
    if isinstance(item, dict):
        url = item.get("url") or item.get("image_url")
        if isinstance(url, str) and url:
            return url
    return None


def _list_urls(items: list[Any]) -> tuple[str, ...]:
    return tuple(url for url in (_item_url(item) for item in items) if url)


def _single_url(payload: dict[str, Any]) -> str | None:
    for key in ("url", "image_url"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    video = payload.get("video")
    if isinstance(video, dict):
        return _item_url(video)
    return None


def _parse_status(value: Any) -> JobStatus:
    try:
        return JobStatus(value)
    except ValueError:
        return JobStatus.unknown


def _message(payload: dict[str, Any]) -> str | None:
    for key in ("message", "error", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def extract_asset_url(payload: Any) -> str | None:
    """Return the first asset URL in a payload, or None if there is none."""
    if isinstance(payload, list):
        urls = _list_urls(payload)
        return urls[0] if urls else None
    if not isinstance(payload, dict):
        return None
    images = payload.get("images")
    if isinstance(images, list):
        urls = _list_urls(images)
        if urls:
            return urls[0]
    return _single_url(payload)


def decode_submission(payload: Any) -> SubmissionShape:
    """Classify a submission response into one ``SubmissionShape`` variant.

    Asset URLs win over a request id when both are present, matching the
    provider's synchronous fast path.
    """
    if isinstance(payload, list):
        urls = _list_urls(payload)
        return UrlArray(urls) if urls else UnknownShape(payload)
    if not isinstance(payload, dict):
        return UnknownShape(payload)

    images = payload.get("images")
    if isinstance(images, list):
        urls = _list_urls(images)
        if urls:
            return UrlArray(urls)

    url = _single_url(payload)
    if url is not None:
        return DirectUrl(url)

    request_id = payload.get("request_id") or payload.get("id")
    if isinstance(request_id, str) and request_id:
        return RequestId(request_id)

    status = _parse_status(payload.get("status"))
    if status in (JobStatus.failed, JobStatus.nsfw):
        return TerminalStatus(status, _message(payload))

    return UnknownShape(payload)


def decode_status(payload: Any) -> StatusSnapshot:
    """Decode a status-check response; non-dict payloads are ``unknown``."""
    if not isinstance(payload, dict):
        return StatusSnapshot(JobStatus.unknown, None, None, None)
    raw_status = payload.get("status")
    return StatusSnapshot(
        status=_parse_status(raw_status),
        url=extract_asset_url(payload),
        message=_message(payload),
        raw_status=raw_status if isinstance(raw_status, str) else None,
    )
