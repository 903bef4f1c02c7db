"""
Google Gemini adapter.

Uses the google-genai SDK streaming call. Without search the native
response schema constrains the output; with search the ``google_search``
tool is attached instead, because the API rejects tools combined with a
JSON response mime type. The prompt always carries the schema in prose.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from infographix.core.exceptions import TransientBackendError
from infographix.core.retry import RetryPolicy
from infographix.llm.prompt_builder import PromptBuilder, build_gemini_schema
from infographix.llm.providers.base import BaseProvider, GenerationOptions, StreamChunk

logger = logging.getLogger(__name__)


def extract_grounding_sources(chunk: Any) -> List[Dict[str, str]]:
    """``{title, uri}`` for every web grounding chunk of the first candidate."""
    candidates = getattr(chunk, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    grounding_chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for grounding_chunk in grounding_chunks:
        web = getattr(grounding_chunk, "web", None)
        if web is None or not getattr(web, "uri", None):
            continue
        sources.append({"title": web.title or web.uri, "uri": web.uri})
    return sources


class GeminiProvider(BaseProvider):
    name = "gemini"
    display_name = "Google Gemini"
    default_model = "gemini-2.0-flash-exp"
    supports_search = True
    reasoning_model = "gemini-2.5-pro"
    api_key_setting = "GEMINI_API_KEY"

    def __init__(
        self,
        api_key: Optional[str],
        retry_policy: Optional[RetryPolicy] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        super().__init__(api_key, retry_policy=retry_policy, prompt_builder=prompt_builder)
        self._owns_client = client is None
        self.client = client or genai.Client(api_key=self.api_key)

    def _build_config(
        self,
        system_instruction: str,
        options: GenerationOptions,
    ) -> types.GenerateContentConfig:
        if self.search_enabled(options):
            return types.GenerateContentConfig(
                system_instruction=system_instruction,
                max_output_tokens=self.max_tokens(options),
                tools=[types.Tool(google_search=types.GoogleSearch())],
            )
        return types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=self.max_tokens(options),
            response_mime_type="application/json",
            response_schema=build_gemini_schema(self.prompt_builder.registry),
        )

    async def _stream(
        self,
        model: str,
        system_instruction: str,
        user_instruction: str,
        options: GenerationOptions,
    ) -> AsyncIterator[StreamChunk]:
        config = self._build_config(system_instruction, options)

        try:
            response = await self.client.aio.models.generate_content_stream(
                model=model,
                contents=user_instruction,
                config=config,
            )
            async for chunk in response:
                yield StreamChunk(
                    text=chunk.text or "",
                    sources=extract_grounding_sources(chunk),
                )

        except genai_errors.APIError as e:
            logger.error(f"[GEMINI] API error: {e.code} - {e.message}")
            raise TransientBackendError(
                f"Gemini API error ({e.code}): {e.message}",
                provider=self.name,
                status_code=e.code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"[GEMINI] Connection error: {e}")
            raise TransientBackendError(f"Cannot reach Gemini: {e}", provider=self.name) from e

    async def close(self) -> None:
        # Injected clients are closed by whoever created them
        if self._owns_client:
            self._owns_client = False
            await self.client.aio.aclose()
