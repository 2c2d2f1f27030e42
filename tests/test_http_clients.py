"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from macro_tracker.adapters.gemini_client import GeminiClient
from macro_tracker.adapters.openai_estimator_client import OpenAIEstimatorClient
from macro_tracker.errors import EstimationFailedError
from macro_tracker.services.estimation import EstimationService, InlineImage


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = '{"calories": 1}') -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_gemini_client_sends_prompt_and_image() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "candidates": [
                    {"content": {"parts": [{"text": '{"calories": 410}'}]}}
                ]
            },
        )

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = GeminiClient(
        base_url="https://gemini.test/v1beta", http_client=async_client
    )

    text = asyncio.run(
        client.generate(
            api_key="secret",
            model="gemini-2.5-flash",
            prompt="Estimate this",
            image=InlineImage(mime_type="image/png", data=b"png-bytes"),
        )
    )

    assert text == '{"calories": 410}'
    request = seen[0]
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.url.params["key"] == "secret"
    parts = json.loads(request.content.decode())["contents"][0]["parts"]
    assert parts[0] == {"text": "Estimate this"}
    assert parts[1]["inlineData"]["mimeType"] == "image/png"
    assert parts[1]["inlineData"]["data"] == "cG5nLWJ5dGVz"


def test_gemini_client_text_only_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        parts = json.loads(request.content.decode())["contents"][0]["parts"]
        assert parts == [{"text": "Hi"}]
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "{}"}]}}]}
        )

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = GeminiClient(base_url="https://gemini.test", http_client=async_client)

    assert asyncio.run(client.generate(api_key="k", model="m", prompt="Hi")) == "{}"


def test_gemini_client_raises_api_error_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "API key not valid"}})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = GeminiClient(base_url="https://gemini.test", http_client=async_client)

    with pytest.raises(RuntimeError, match="API key not valid"):
        asyncio.run(client.generate(api_key="bad", model="m", prompt="Hi"))


def test_gemini_client_raises_without_candidates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = GeminiClient(base_url="https://gemini.test", http_client=async_client)

    with pytest.raises(RuntimeError):
        asyncio.run(client.generate(api_key="k", model="m", prompt="Hi"))


def test_gemini_client_rejects_non_text_part() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": 42}]}}]}
        )

    def build_client() -> GeminiClient:
        async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeminiClient(base_url="https://gemini.test", http_client=async_client)

    service = EstimationService(client=build_client(), model="m")

    with pytest.raises(RuntimeError, match="non-text"):
        asyncio.run(build_client().generate(api_key="k", model="m", prompt="Hi"))
    with pytest.raises(EstimationFailedError):
        asyncio.run(service.estimate_meal_from_name("k", "apple"))


def test_openai_estimator_client_parses_output() -> None:
    fake = _FakeOpenAI()
    client = OpenAIEstimatorClient(clients={"key": fake})  # type: ignore[dict-item]

    text = asyncio.run(
        client.generate(
            api_key="key",
            model="gpt-5.2",
            prompt="Estimate",
            image=InlineImage(mime_type="image/jpeg", data=b"abc"),
        )
    )

    assert text == '{"calories": 1}'
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["model"] == "gpt-5.2"
    content = payload["input"][0]["content"]
    assert content[1]["image_url"] == "data:image/jpeg;base64,YWJj"

    asyncio.run(client.close())
    assert fake.closed
    assert client.clients == {}


def test_openai_estimator_client_rejects_empty_output() -> None:
    client = OpenAIEstimatorClient(
        clients={"key": _FakeOpenAI(output_text="")}  # type: ignore[dict-item]
    )

    with pytest.raises(RuntimeError):
        asyncio.run(client.generate(api_key="key", model="m", prompt="Hi"))
