"""Integration tests for HiggsfieldClient against respx-mocked endpoints."""

from __future__ import annotations

import httpx
import pytest
import respx

from reeltrack.config import HiggsfieldConfig
from reeltrack.generation.errors import (
    MalformedResponseError,
    MissingCredentialsError,
    ProviderFailedError,
    UpstreamUnavailableError,
)
from reeltrack.generation.higgsfield import (
    HiggsfieldClient,
    ImageGenerationRequest,
    VideoGenerationRequest,
)
from reeltrack.generation.shapes import JobStatus

BASE_URL = "https://higgsfield.test"
IMAGE_PATH = "/higgsfield-ai/soul/standard"


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def config() -> HiggsfieldConfig:
    return HiggsfieldConfig(base_url=BASE_URL, api_key="key-id", api_secret="key-secret")


class TestSubmitRetry:
    """Test submission retry with linear backoff."""

    @pytest.mark.asyncio
    async def test_immediate_url_array(self, config: HiggsfieldConfig, sleep: RecordingSleep) -> None:
        """Test that a synchronous images payload resolves without polling."""
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post(IMAGE_PATH).mock(return_value=httpx.Response(200, json={"images": ["u1"]}))
            async with HiggsfieldClient(config, sleep=sleep) as client:
                result = await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert result.url == "u1"
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_three_timeouts_exhaust_retries(
        self, config: HiggsfieldConfig, sleep: RecordingSleep
    ) -> None:
        """Test attempts, backoff schedule and the absence of a trailing wait."""
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post(IMAGE_PATH).mock(side_effect=httpx.ReadTimeout("timed out"))
            async with HiggsfieldClient(config, sleep=sleep) as client:
                with pytest.raises(UpstreamUnavailableError) as exc_info:
                    await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert exc_info.value.attempts == 3
        assert route.call_count == 3
        assert sleep.calls == [2.0, 4.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.RemoteProtocolError("Server disconnected without sending a response."),
            httpx.ProxyError("proxy refused"),
        ],
    )
    async def test_transport_failures_are_retried(
        self, config: HiggsfieldConfig, sleep: RecordingSleep, error: httpx.TransportError
    ) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post(IMAGE_PATH).mock(side_effect=error)
            async with HiggsfieldClient(config, sleep=sleep) as client:
                with pytest.raises(UpstreamUnavailableError) as exc_info:
                    await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert exc_info.value.attempts == 3
        assert route.call_count == 3
        assert sleep.calls == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_redirect_loop_is_not_retried(
        self, config: HiggsfieldConfig, sleep: RecordingSleep
    ) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post(IMAGE_PATH).mock(side_effect=httpx.TooManyRedirects("redirect loop"))
            async with HiggsfieldClient(config, sleep=sleep) as client:
                with pytest.raises(UpstreamUnavailableError) as exc_info:
                    await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert exc_info.value.attempts == 1
        assert route.call_count == 1
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(
        self, config: HiggsfieldConfig, sleep: RecordingSleep
    ) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post(IMAGE_PATH).mock(
                side_effect=[
                    httpx.ConnectError("connection reset"),
                    httpx.Response(200, json={"url": "u1"}),
                ]
            )
            async with HiggsfieldClient(config, sleep=sleep) as client:
                result = await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert result.url == "u1"
        assert route.call_count == 2
        assert sleep.calls == [2.0]

    @pytest.mark.asyncio
    async def test_error_status_is_not_retried(
        self, config: HiggsfieldConfig, sleep: RecordingSleep
    ) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post(IMAGE_PATH).mock(
                return_value=httpx.Response(500, json={"message": "internal error"})
            )
            async with HiggsfieldClient(config, sleep=sleep) as client:
                with pytest.raises(ProviderFailedError) as exc_info:
                    await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "internal error"
        assert route.call_count == 1
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_non_json_response(self, config: HiggsfieldConfig, sleep: RecordingSleep) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post(IMAGE_PATH).mock(return_value=httpx.Response(200, text="<html>ok</html>"))
            async with HiggsfieldClient(config, sleep=sleep) as client:
                with pytest.raises(ProviderFailedError, match="non-JSON"):
                    await client.generate_image(ImageGenerationRequest(prompt="a fox"))

    @pytest.mark.asyncio
    async def test_unrecognised_payload(self, config: HiggsfieldConfig, sleep: RecordingSleep) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post(IMAGE_PATH).mock(return_value=httpx.Response(200, json={"ok": True}))
            async with HiggsfieldClient(config, sleep=sleep) as client:
                with pytest.raises(MalformedResponseError):
                    await client.generate_image(ImageGenerationRequest(prompt="a fox"))


class TestPolling:
    """Test end-to-end polling through the client."""

    @pytest.mark.asyncio
    async def test_video_polling(self, config: HiggsfieldConfig, sleep: RecordingSleep) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            submit = mock.post("/v1/image2video/dop").mock(
                return_value=httpx.Response(200, json={"request_id": "r1"})
            )
            mock.get("/requests/r1/status").mock(
                side_effect=[
                    httpx.Response(200, json={"status": "in_progress"}),
                    httpx.Response(200, json={"status": "in_progress"}),
                    httpx.Response(200, json={"status": "in_progress"}),
                    httpx.Response(200, json={"status": "completed", "video": {"url": "v1"}}),
                ]
            )
            async with HiggsfieldClient(config, sleep=sleep) as client:
                result = await client.generate_video(
                    VideoGenerationRequest(image_url="https://cdn/u1.png", model="dop-lite")
                )

        assert result.url == "v1"
        assert sleep.calls == [2.0, 2.0, 2.0]
        assert submit.calls.last.request.headers["hf-api-key"] == "key-id"

    @pytest.mark.asyncio
    async def test_status_server_errors_are_retried(
        self, config: HiggsfieldConfig, sleep: RecordingSleep
    ) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post(IMAGE_PATH).mock(return_value=httpx.Response(200, json={"request_id": "r2"}))
            mock.get("/requests/r2/status").mock(
                side_effect=[
                    httpx.Response(502, text="bad gateway"),
                    httpx.Response(200, json={"status": "completed", "images": [{"url": "u9"}]}),
                ]
            )
            async with HiggsfieldClient(config, sleep=sleep) as client:
                result = await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        assert result.url == "u9"


class TestJobStatus:
    """Test one-off status checks."""

    @pytest.mark.asyncio
    async def test_snapshot(self, config: HiggsfieldConfig) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.get("/requests/r3/status").mock(
                return_value=httpx.Response(200, json={"status": "completed", "images": [{"url": "u3"}]})
            )
            async with HiggsfieldClient(config) as client:
                snapshot = await client.get_job_status("r3")

        assert snapshot.status is JobStatus.completed
        assert snapshot.url == "u3"

    @pytest.mark.asyncio
    async def test_network_failure(self, config: HiggsfieldConfig) -> None:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.get("/requests/r4/status").mock(side_effect=httpx.ConnectError("down"))
            async with HiggsfieldClient(config) as client:
                with pytest.raises(UpstreamUnavailableError):
                    await client.get_job_status("r4")


class TestCredentials:
    """Test credential handling."""

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_before_any_request(self, sleep: RecordingSleep) -> None:
        with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
            route = mock.post(IMAGE_PATH)
            client = HiggsfieldClient(HiggsfieldConfig(base_url=BASE_URL), sleep=sleep)
            assert client.configured is False
            with pytest.raises(MissingCredentialsError):
                await client.generate_image(ImageGenerationRequest(prompt="a fox"))
            await client.close()

        assert not route.called

    @pytest.mark.asyncio
    async def test_combined_credentials_are_sent(self, sleep: RecordingSleep) -> None:
        config = HiggsfieldConfig(base_url=BASE_URL, credentials="combo-id:combo-secret")
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post(IMAGE_PATH).mock(return_value=httpx.Response(200, json={"url": "u1"}))
            async with HiggsfieldClient(config, sleep=sleep) as client:
                await client.generate_image(ImageGenerationRequest(prompt="a fox"))

        headers = route.calls.last.request.headers
        assert headers["hf-api-key"] == "combo-id"
        assert headers["hf-secret"] == "combo-secret"

    def test_request_defaults(self) -> None:
        payload = ImageGenerationRequest(prompt="a fox").to_payload()
        assert payload == {
            "prompt": "a fox",
            "aspect_ratio": "9:16",
            "resolution": "720p",
            "batch_size": 1,
            "enhance_prompt": True,
            "style_strength": 1.0,
        }
