"""Completion clients for the remote language model.

``CompletionClient.complete`` is the only awaited network call in the
pipeline. Providers implement ``_generate``; the base class bounds it with a
timeout and turns every provider failure into ``UpstreamError``. Retries are
disabled at the SDK level.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx
import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import settings
from services.errors import UpstreamError
from services.prompt_builder import Prompt

logger = logging.getLogger(__name__)


def _status_cause(status_code: int | None) -> str:
    if status_code == 429:
        return "rate_limited"
    return f"status_{status_code}"


class CompletionClient(ABC):
    """Submit a prompt, get raw text back."""

    provider: str = ""

    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        timeout: float = 30.0,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @abstractmethod
    async def _generate(self, prompt: Prompt) -> str | None:
        """Call the provider and return the generated text."""

    async def complete(self, prompt: Prompt) -> str:
        try:
            text = await asyncio.wait_for(self._generate(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise UpstreamError("timeout", f"no response within {self.timeout}s") from None

        if not text or not text.strip():
            raise UpstreamError("empty_response", f"{self.provider} returned no content")
        return text


class ChatCompletionClient(CompletionClient):
    """OpenAI-compatible chat-completions endpoint (OpenAI, Groq, ...)."""

    provider = "openai"

    def __init__(self, api_key: str, base_url: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    async def _generate(self, prompt: Prompt) -> str | None:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                messages=prompt.messages(),
            )
        except openai.APITimeoutError as e:
            raise UpstreamError("timeout", str(e)) from e
        except openai.APIConnectionError as e:
            raise UpstreamError("network", str(e)) from e
        except openai.APIStatusError as e:
            raise UpstreamError(_status_cause(e.status_code), str(e)) from e
        except openai.APIError as e:
            raise UpstreamError("bad_response", str(e)) from e

        if not completion.choices:
            return None
        return completion.choices[0].message.content


class GeminiCompletionClient(CompletionClient):
    """Google Gemini via the google-genai SDK."""

    provider = "gemini"

    def __init__(self, api_key: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self._client = genai.Client(api_key=api_key)

    async def _generate(self, prompt: Prompt) -> str | None:
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt.user_message,
                config=types.GenerateContentConfig(
                    system_instruction=prompt.system_instruction,
                    temperature=self.temperature,
                    max_output_tokens=self.max_tokens,
                ),
            )
        except genai_errors.APIError as e:
            raise UpstreamError(_status_cause(e.code), str(e)) from e
        except httpx.TimeoutException as e:
            raise UpstreamError("timeout", str(e)) from e
        except httpx.TransportError as e:
            raise UpstreamError("network", str(e)) from e
        except (httpx.HTTPError, ValueError) as e:
            # Undecodable or unexpected response bodies surface as ValueError
            raise UpstreamError("bad_response", str(e)) from e

        return response.text


_client: CompletionClient | None = None
_resolved = False


def create_client() -> CompletionClient | None:
    """Build the provider selected in settings, or None without an API key."""
    if not settings.api_key:
        logger.warning("No API key set for provider %r - analysis disabled", settings.llm_provider)
        return None

    common = {
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
        "timeout": settings.llm_timeout_seconds,
    }
    if settings.llm_provider == "gemini":
        return GeminiCompletionClient(
            api_key=settings.gemini_api_key, model=settings.gemini_model, **common
        )
    if settings.llm_provider == "openai":
        return ChatCompletionClient(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url or None,
            model=settings.llm_model,
            **common,
        )
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")


def get_client() -> CompletionClient | None:
    """Build the client on first use; a missing key is also remembered."""
    global _client, _resolved
    if not _resolved:
        _client = create_client()
        _resolved = True
    return _client


def reset_client() -> None:
    """Drop the cached client. Useful for testing."""
    global _client, _resolved
    _client = None
    _resolved = False

