"""Chat-completion client for an OpenAI-compatible API.

This module provides an async HTTP client for ``{base_url}/chat/completions``.
It is deliberately small: one request per call, no retries, errors mapped
onto a short exception hierarchy.

Example usage:
    >>> from reeltrack.config import LlmConfig
    >>> async with ChatCompletionClient(LlmConfig(api_key="sk-...")) as chat:
    ...     text = await chat.complete([{"role": "user", "content": "Hello"}])
"""

from __future__ import annotations

from typing import Any

import httpx

from reeltrack.config import LlmConfig
from reeltrack.logging import get_logger

logger = get_logger(__name__)


class ChatClientError(Exception):
    """Base exception for chat client errors."""

    pass


class ChatNotConfiguredError(ChatClientError):
    """Raised when no API key is configured."""

    pass


class ChatConnectionError(ChatClientError):
    """Raised when the API cannot be reached or times out."""

    pass


class ChatAPIError(ChatClientError):
    """Raised when the API returns an error or an unusable response.

    Attributes:
        status_code: HTTP status of the response, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ChatCompletionClient:
    """Async client for OpenAI-compatible chat completions.

    Attributes:
        config: LLM configuration containing key, base URL, model and timeout
    """

    def __init__(
        self,
        config: LlmConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if config.api_key:
            logger.info("chat_client_initialized", base_url=config.base_url, model=config.model)
        else:
            logger.info("chat_client_not_configured", base_url=config.base_url)

    async def __aenter__(self) -> ChatCompletionClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        json_mode: bool = False,
        temperature: float | None = None,
    ) -> str:
        """Send a chat completion and return the first choice's content.

        Args:
            messages: Chat messages ({"role", "content"} dicts)
            json_mode: Ask the model for a JSON object response
            temperature: Optional sampling temperature

        Returns:
            Message content of the first choice.

        Raises:
            ChatNotConfiguredError: If no API key is configured
            ChatConnectionError: On timeout or network failure
            ChatAPIError: On an error status or a response without content
        """
        if not self.configured:
            raise ChatNotConfiguredError("LLM API key not configured. Set REELTRACK_LLM__API_KEY.")

        body: dict[str, Any] = {"model": self.config.model, "messages": messages}
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        if temperature is not None:
            body["temperature"] = temperature

        client = self._get_client()
        try:
            response = await client.post("/chat/completions", json=body)
        except httpx.TimeoutException as e:
            logger.error("chat_completion_timeout", timeout_seconds=self.config.timeout_seconds)
            raise ChatConnectionError(
                f"Chat completion timed out after {self.config.timeout_seconds}s"
            ) from e
        except httpx.TransportError as e:
            logger.error("chat_completion_connection_error", base_url=self.config.base_url, error=str(e))
            raise ChatConnectionError(f"Failed to reach {self.config.base_url}: {e}") from e

        if not response.is_success:
            logger.error(
                "chat_completion_api_error",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise ChatAPIError(
                f"API error: HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ChatAPIError("Invalid response format: missing choices[0].message.content") from e

        if not isinstance(content, str) or not content.strip():
            raise ChatAPIError("No response content from AI")

        logger.info(
            "chat_completion_received",
            model=self.config.model,
            json_mode=json_mode,
            content_length=len(content),
        )
        return content
