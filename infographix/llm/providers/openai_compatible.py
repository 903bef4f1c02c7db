from __future__ import annotations

import json
import logging
from typing import AsyncIterator, Optional

import httpx

from infographix.core.config import settings
from infographix.core.exceptions import TransientBackendError
from infographix.core.retry import RetryPolicy
from infographix.llm.prompt_builder import PromptBuilder
from infographix.llm.providers.base import BaseProvider, GenerationOptions, StreamChunk

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(BaseProvider):
    """
    Streaming client for backends speaking the OpenAI chat completions API.

    Posts to ``{base_url}/chat/completions`` with ``stream: true`` and reads
    server-sent events until ``[DONE]``. A fresh request is made per
    attempt; the HTTP client is shared across attempts.
    """

    base_url: str = ""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(api_key, retry_policy=retry_policy, prompt_builder=prompt_builder)
        if base_url:
            self.base_url = base_url
        self.base_url = self.base_url.rstrip("/")

        self.timeout = httpx.Timeout(
            connect=settings.HTTP_CONNECT_TIMEOUT,
            read=settings.HTTP_READ_TIMEOUT,
            write=settings.HTTP_WRITE_TIMEOUT,
            pool=settings.HTTP_POOL_TIMEOUT,
        )
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            transport=transport,
        )

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(
        self,
        model: str,
        system_instruction: str,
        user_instruction: str,
        options: GenerationOptions,
    ) -> dict:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_instruction},
            ],
            "stream": True,
            "response_format": {"type": "json_object"},
            "max_tokens": self.max_tokens(options),
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self.client.aclose()

    async def _stream(
        self,
        model: str,
        system_instruction: str,
        user_instruction: str,
        options: GenerationOptions,
    ) -> AsyncIterator[StreamChunk]:
        url = f"{self.base_url}/chat/completions"
        payload = self._build_payload(model, system_instruction, user_instruction, options)
        tag = f"[{self.name.upper()}]"

        try:
            async with self.client.stream("POST", url, json=payload, headers=self._get_headers()) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    logger.error(f"{tag} HTTP error: {response.status_code} - {body[:500]}")
                    raise TransientBackendError(
                        f"{self.display_name} API error ({response.status_code}): {body[:500]}",
                        provider=self.name,
                        status_code=response.status_code,
                    )

                async for line in response.aiter_lines():
                    line = line.strip()
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == "[DONE]":
                        break

                    try:
                        event = json.loads(data)
                    except json.JSONDecodeError:
                        continue

                    if isinstance(event, dict) and event.get("error"):
                        error = event["error"]
                        message = error.get("message") if isinstance(error, dict) else str(error)
                        raise TransientBackendError(
                            f"{self.display_name} stream error: {message}",
                            provider=self.name,
                        )

                    if content := self._extract_content(event):
                        yield StreamChunk(text=content)

        except httpx.TimeoutException as e:
            logger.error(f"{tag} Request timed out after {self.timeout.read}s")
            raise TransientBackendError(
                f"{self.display_name} request timed out", provider=self.name
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{tag} Connection error: {e}")
            raise TransientBackendError(
                f"Cannot reach {self.display_name} at {self.base_url}: {e}", provider=self.name
            ) from e

    @staticmethod
    def _extract_content(event) -> str:
        """``choices[0].delta.content`` or empty string."""
        try:
            return event["choices"][0]["delta"].get("content") or ""
        except (KeyError, IndexError, TypeError, AttributeError):
            return ""
