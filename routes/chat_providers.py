# routes/chat_providers.py
"""Upstream generative-AI providers behind the chat relay.

Each provider exposes ``complete(message)`` for a single reply and
``stream(message)`` yielding text chunks as the upstream produces them. Any
failure (missing key, network, quota, auth, unexpected payload) surfaces as
``UpstreamFailure``; nothing here retries.
"""
import json
import logging
import traceback
from typing import AsyncIterator, List, Optional

import httpx
import openai

import config
from errors import UpstreamFailure

logger = logging.getLogger(__name__)


class ChatProvider:
    name = "provider"

    async def complete(self, message: str) -> str:
        raise NotImplementedError

    def stream(self, message: str) -> AsyncIterator[str]:
        raise NotImplementedError


class OpenAIChatProvider(ChatProvider):
    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 system_prompt: Optional[str] = None, client=None):
        self.api_key = api_key or config.OPENAI_API_KEY
        self.model = model or config.OPENAI_MODEL
        self.system_prompt = system_prompt or config.CHAT_SYSTEM_PROMPT
        self._client = client

    def _get_client(self):
        if not self.api_key:
            logger.error("OpenAI API key not configured")
            raise UpstreamFailure("OpenAI API key not configured")
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self.api_key)
        return self._client

    def _messages(self, message: str) -> List[dict]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": message},
        ]

    async def complete(self, message: str) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=self._messages(message),
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {str(e)}")
            raise UpstreamFailure("OpenAI API error") from e

        if not response.choices:
            logger.error("OpenAI API response missing 'choices' field")
            raise UpstreamFailure("OpenAI API returned no choices")
        return response.choices[0].message.content or ""

    async def stream(self, message: str) -> AsyncIterator[str]:
        client = self._get_client()
        try:
            upstream = await client.chat.completions.create(
                model=self.model,
                messages=self._messages(message),
                stream=True,
            )
            try:
                async for chunk in upstream:
                    if not chunk.choices:
                        continue
                    text = chunk.choices[0].delta.content
                    if text:
                        yield text
            finally:
                await upstream.close()
        except openai.OpenAIError as e:
            logger.error(f"OpenAI streaming error: {str(e)}")
            raise UpstreamFailure("OpenAI API error") from e


def _candidate_text(data: dict) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


class GeminiChatProvider(ChatProvider):
    name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key or config.GEMINI_API_KEY
        self.model = model or config.GEMINI_MODEL
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")
        self._transport = transport

    def _url(self, method: str) -> str:
        return f"{self.base_url}/models/{self.model}:{method}"

    def _payload(self, message: str) -> dict:
        return {"contents": [{"role": "user", "parts": [{"text": message}]}]}

    def _check_key(self):
        if not self.api_key:
            logger.error("Gemini API key not configured")
            raise UpstreamFailure("Gemini API key not configured")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=None)

    async def complete(self, message: str) -> str:
        self._check_key()
        try:
            async with self._client() as client:
                response = await client.post(
                    self._url("generateContent"),
                    params={"key": self.api_key},
                    json=self._payload(message),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini API HTTP error: {e.response.status_code} {e.response.text}")
            raise UpstreamFailure("Gemini API error") from e
        except httpx.RequestError as e:
            logger.error(f"Gemini API request error: {str(e)}\nTraceback: {traceback.format_exc()}")
            raise UpstreamFailure("Could not reach Gemini") from e

        text = _candidate_text(data)
        if not text:
            logger.error(f"Unexpected Gemini response: {data}")
            raise UpstreamFailure("Gemini API returned no text")
        return text

    async def stream(self, message: str) -> AsyncIterator[str]:
        self._check_key()
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    self._url("streamGenerateContent"),
                    params={"alt": "sse", "key": self.api_key},
                    json=self._payload(message),
                ) as response:
                    if response.status_code >= 400:
                        body = await response.aread()
                        logger.error(f"Gemini streaming HTTP error: {response.status_code} {body[:500]!r}")
                        raise UpstreamFailure("Gemini API error")
                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        raw = line[len("data:"):].strip()
                        if not raw:
                            continue
                        try:
                            data = json.loads(raw)
                        except json.JSONDecodeError as e:
                            logger.error(f"Malformed Gemini stream frame: {raw[:200]}")
                            raise UpstreamFailure("Gemini API returned a malformed stream") from e
                        text = _candidate_text(data)
                        if text:
                            yield text
        except httpx.RequestError as e:
            logger.error(f"Gemini streaming request error: {str(e)}")
            raise UpstreamFailure("Could not reach Gemini") from e


def get_openai_provider() -> ChatProvider:
    return OpenAIChatProvider()


def get_gemini_provider() -> ChatProvider:
    return GeminiChatProvider()
