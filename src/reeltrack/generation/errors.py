"""Exceptions raised by the media-generation proxy.

Each error carries a stable ``code`` so the route layer and UI can tell a
content-policy rejection apart from a generic provider failure.
"""

from __future__ import annotations


class MediaGenerationError(Exception):
    """Base exception for media-generation errors."""

    code = "media_generation_error"


class MissingCredentialsError(MediaGenerationError):
    """Raised when Higgsfield credentials are not configured."""

    code = "missing_credentials"


class UpstreamUnavailableError(MediaGenerationError):
    """Raised when the provider stays unreachable after all retries.

    Attributes:
        attempts: Number of attempts made before giving up.
    """

    code = "upstream_unavailable"

    def __init__(self, message: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)


class ProviderFailedError(MediaGenerationError):
    """Raised when the provider reports an error or a failed job.

    Attributes:
        status_code: HTTP status of the provider response, if any.
    """

    code = "provider_failed"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProviderRejectedError(MediaGenerationError):
    """Raised when the provider rejects the request on content policy."""

    code = "provider_rejected"


class GenerationTimeoutError(MediaGenerationError):
    """Raised when polling reaches its attempt ceiling without a result.

    Attributes:
        attempts: Number of status checks performed.
    """

    code = "generation_timeout"

    def __init__(self, message: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)


class MalformedResponseError(MediaGenerationError):
    """Raised when a provider payload matches no known success shape."""

    code = "malformed_response"
