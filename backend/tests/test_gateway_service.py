"""
MindPad Backend — AI Gateway Service Unit Tests
================================================

What:  GatewayService against httpx.MockTransport (no network).

What we test:
    ✅ Success returns choices[0].message.content; request carries the
       bearer credential, the model and both messages
    ✅ 429 / 402 / other statuses map to their proxy errors
    ✅ Transport failures and unreadable bodies become "AI gateway error"
    ✅ Missing credential fails before any request is sent
    ✅ Exactly one request per call (no retries)
"""

import json

import httpx
import pytest

from mindpad.exceptions import (
    GatewayConfigurationError,
    GatewayCreditsError,
    GatewayError,
    GatewayRateLimitError,
)
from mindpad.services.gateway_service import GatewayService

GATEWAY_URL = "https://gateway.test/v1/chat/completions"
MESSAGES = [
    {"role": "system", "content": "sys"},
    {"role": "user", "content": "hello"},
]


def make_service(handler, api_key="secret-key"):
    return GatewayService(
        api_url=GATEWAY_URL,
        api_key=api_key,
        model="google/gemini-2.5-flash",
        transport=httpx.MockTransport(handler),
    )


def completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class TestGatewaySuccess:

    @pytest.mark.asyncio
    async def test_returns_first_choice_content(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=completion("A short summary."))

        result = await make_service(handler).complete(MESSAGES)

        assert result == "A short summary."
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == GATEWAY_URL
        assert request.headers["Authorization"] == "Bearer secret-key"
        body = json.loads(request.content)
        assert body == {"model": "google/gemini-2.5-flash", "messages": MESSAGES}


class TestGatewayFailures:

    @pytest.mark.asyncio
    async def test_429_maps_to_rate_limit(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(429, json={"error": "slow down"})

        with pytest.raises(GatewayRateLimitError) as exc_info:
            await make_service(handler).complete(MESSAGES)

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "Rate limit exceeded. Please try again later."
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_402_maps_to_credits_exhausted(self):
        with pytest.raises(GatewayCreditsError) as exc_info:
            await make_service(lambda r: httpx.Response(402)).complete(MESSAGES)

        assert exc_info.value.status_code == 402
        assert exc_info.value.message == "AI credits exhausted. Please add credits."

    @pytest.mark.asyncio
    async def test_other_status_is_generic_error_and_logged(self, caplog):
        handler = lambda r: httpx.Response(503, text="upstream exploded")  # noqa: E731

        with caplog.at_level("ERROR", logger="mindpad.services.gateway_service"):
            with pytest.raises(GatewayError) as exc_info:
                await make_service(handler).complete(MESSAGES)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "AI gateway error"
        assert "503" in caplog.text
        assert "upstream exploded" in caplog.text

    @pytest.mark.asyncio
    async def test_transport_error_is_generic_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GatewayError):
            await make_service(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"choices": []}),
            httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
        ],
    )
    async def test_unreadable_success_body_is_generic_error(self, response):
        with pytest.raises(GatewayError):
            await make_service(lambda r: response).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_missing_credential_sends_nothing(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion("unused"))

        service = make_service(handler, api_key="")
        with pytest.raises(GatewayConfigurationError) as exc_info:
            await service.complete(MESSAGES)

        assert exc_info.value.message == "AI_GATEWAY_API_KEY is not configured"
        assert calls == []


class TestGatewayHealth:

    @pytest.mark.asyncio
    async def test_health_reflects_configuration(self):
        assert await make_service(lambda r: httpx.Response(200), api_key="k").health_check() is True
        assert await make_service(lambda r: httpx.Response(200), api_key="").health_check() is False
