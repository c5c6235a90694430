"""Tests for the completion clients. SDK objects are replaced with mocks."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from config import settings
from services import completion_client
from services.completion_client import (
    ChatCompletionClient,
    GeminiCompletionClient,
    create_client,
    get_client,
    reset_client,
)
from services.errors import UpstreamError
from services.prompt_builder import Prompt

from fakes import VALID_JSON, FakeCompletionClient

PROMPT = Prompt(system_instruction="system text", user_message="user text")
REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def _chat_client(**kwargs) -> ChatCompletionClient:
    client = ChatCompletionClient(api_key="test-key", base_url="https://api.example.com/v1", model="test-model", **kwargs)
    client._client = MagicMock()
    client._client.chat.completions.create = AsyncMock()
    return client


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestCompletionClientBase:
    @pytest.mark.asyncio
    async def test_returns_raw_text(self):
        client = FakeCompletionClient(reply="raw text")
        assert await client.complete(PROMPT) == "raw text"
        assert client.prompts == [PROMPT]

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = FakeCompletionClient(delay=5.0, timeout=0.05)
        loop = asyncio.get_running_loop()
        started = loop.time()
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "timeout"
        assert loop.time() - started < 1.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [None, "", "   \n"])
    async def test_empty_response(self, reply):
        client = FakeCompletionClient(reply=reply)
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "empty_response"


class TestChatCompletionClient:
    @pytest.mark.asyncio
    async def test_sends_fixed_parameters(self):
        client = _chat_client(temperature=0.2, max_tokens=1000)
        client._client.chat.completions.create.return_value = _completion(VALID_JSON)

        assert await client.complete(PROMPT) == VALID_JSON
        client._client.chat.completions.create.assert_awaited_once_with(
            model="test-model",
            temperature=0.2,
            max_tokens=1000,
            messages=[
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "user text"},
            ],
        )

    def test_sdk_retries_disabled(self):
        client = ChatCompletionClient(api_key="test-key", model="test-model", timeout=12.0)
        assert client._client.max_retries == 0

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        client = _chat_client()
        response = httpx.Response(429, request=REQUEST)
        client._client.chat.completions.create.side_effect = openai.RateLimitError(
            "rate limited", response=response, body=None
        )
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "rate_limited"

    @pytest.mark.asyncio
    async def test_server_error_status(self):
        client = _chat_client()
        response = httpx.Response(503, request=REQUEST)
        client._client.chat.completions.create.side_effect = openai.InternalServerError(
            "unavailable", response=response, body=None
        )
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "status_503"

    @pytest.mark.asyncio
    async def test_network_error(self):
        client = _chat_client()
        client._client.chat.completions.create.side_effect = openai.APIConnectionError(request=REQUEST)
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "network"

    @pytest.mark.asyncio
    async def test_sdk_timeout(self):
        client = _chat_client()
        client._client.chat.completions.create.side_effect = openai.APITimeoutError(request=REQUEST)
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "timeout"

    @pytest.mark.asyncio
    async def test_no_choices(self):
        client = _chat_client()
        client._client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "empty_response"

    @pytest.mark.asyncio
    async def test_malformed_success_body(self):
        client = _chat_client()
        response = httpx.Response(200, request=REQUEST, content=b'{"unexpected": true}')
        response = httpx.Response(200, request=REQUEST, content=b"{\"unexpected\": true}")
        client._client.chat.completions.create.side_effect = openai.APIResponseValidationError(
            response=response, body=None
        )
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "bad_response"


class TestGeminiCompletionClient:
    def _client(self):
        client = GeminiCompletionClient(api_key="test-key", model="gemini-test", temperature=0.2, max_tokens=1000)
        client._client = MagicMock()
        client._client.aio.models.generate_content = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_system_instruction_in_config(self):
        client = self._client()
        client._client.aio.models.generate_content.return_value = SimpleNamespace(text=VALID_JSON)

        assert await client.complete(PROMPT) == VALID_JSON
        kwargs = client._client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "user text"
        assert kwargs["config"].system_instruction == "system text"
        assert kwargs["config"].temperature == 0.2
        assert kwargs["config"].max_output_tokens == 1000

    @pytest.mark.asyncio
    async def test_api_error_status(self):
        client = self._client()
        client._client.aio.models.generate_content.side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "rate_limited"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = self._client()
        client._client.aio.models.generate_content.side_effect = httpx.ConnectError("refused")
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "network"

    @pytest.mark.asyncio
    async def test_undecodable_response(self):
        client = self._client()
        client._client.aio.models.generate_content.side_effect = ValueError("Expecting value: line 1 column 1")
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "bad_response"

    @pytest.mark.asyncio
    async def test_blocked_response_is_empty(self):
        client = self._client()
        client._client.aio.models.generate_content.return_value = SimpleNamespace(text=None)
        with pytest.raises(UpstreamError) as exc:
            await client.complete(PROMPT)
        assert exc.value.cause == "empty_response"


class TestClientFactory:
    @pytest.fixture(autouse=True)
    def _reset(self):
        reset_client()
        yield
        reset_client()

    def test_no_api_key_returns_none(self):
        with patch.object(settings, "llm_provider", "openai"), patch.object(settings, "llm_api_key", ""):
            assert create_client() is None

    def test_openai_provider(self):
        with patch.object(settings, "llm_provider", "openai"), patch.object(settings, "llm_api_key", "k"):
            client = create_client()
        assert isinstance(client, ChatCompletionClient)
        assert client.temperature == settings.llm_temperature
        assert client.max_tokens == settings.llm_max_tokens
        assert client.timeout == settings.llm_timeout_seconds

    def test_gemini_provider(self):
        with patch.object(settings, "llm_provider", "gemini"), patch.object(settings, "gemini_api_key", "k"):
            client = create_client()
        assert isinstance(client, GeminiCompletionClient)
        assert client.model == settings.gemini_model

    def test_unknown_provider(self):
        with patch.object(settings, "llm_provider", "mystery"), patch.object(settings, "llm_api_key", "k"):
            with pytest.raises(ValueError):
                create_client()

    def test_get_client_cached(self):
        with patch.object(settings, "llm_provider", "openai"), patch.object(settings, "llm_api_key", "k"):
            first = get_client()
            assert get_client() is first
        assert completion_client._client is first

    def test_missing_key_resolved_once(self):
        with patch.object(completion_client, "create_client", return_value=None) as create:
            assert get_client() is None
            assert get_client() is None
        assert create.call_count == 1
