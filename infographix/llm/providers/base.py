"""
Provider adapter contract.

Every backend implements ``_stream`` (one attempt: yield text deltas and,
for search-capable backends, grounding sources). Everything around it is
shared: model resolution, prompt assembly, the per-attempt accumulator,
source de-duplication and the retry policy.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

from infographix.core.config import settings
from infographix.core.exceptions import ConfigurationError
from infographix.core.retry import RetryPolicy, default_retry_policy
from infographix.llm.prompt_builder import PromptBuilder
from infographix.llm.streaming import PartialCallback, Report, StreamAccumulator

logger = logging.getLogger(__name__)


@dataclass
class GenerationOptions:
    """Per-request knobs. ``None`` means "use the adapter or settings default"."""
    model: Optional[str] = None
    language: Optional[str] = None
    # Search is on for capable backends unless explicitly False
    enable_search: Optional[bool] = None
    max_tokens: Optional[int] = None
    section_count: Optional[int] = None
    include_few_shot: bool = True


@dataclass
class StreamChunk:
    """One piece of a backend stream."""
    text: str = ""
    sources: List[Dict[str, str]] = field(default_factory=list)


def merge_sources(report: Report, sources: List[Dict[str, str]], limit: Optional[int] = None) -> Report:
    """
    Return a copy of ``report`` with de-duplicated ``sources`` attached.

    First occurrence of a URI wins and order is preserved. When nothing
    usable was collected the ``sources`` key is not added at all.
    """
    cap = settings.GROUNDING_MAX_SOURCES if limit is None else limit
    seen = set()
    unique: List[Dict[str, str]] = []

    for source in sources:
        uri = source.get("uri")
        if not uri or uri in seen:
            continue
        seen.add(uri)
        unique.append({"title": source.get("title") or uri, "uri": uri})
        if cap and len(unique) >= cap:
            break

    merged = dict(report)
    if unique:
        merged["sources"] = unique
    return merged


class BaseProvider(ABC):
    """Uniform generation contract shared by all backends."""

    name: str = "base"
    display_name: str = "Base"
    default_model: str = ""
    supports_search: bool = False
    # Model used when the caller raises max_tokens without naming a model
    reasoning_model: Optional[str] = None
    # Settings attribute holding this backend's key
    api_key_setting: str = ""

    def __init__(
        self,
        api_key: Optional[str],
        retry_policy: Optional[RetryPolicy] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        if not api_key:
            raise ConfigurationError(
                f"{self.display_name} API key is not configured. "
                f"Set {self.api_key_setting or 'the API key'} or provide a key at runtime.",
                provider=self.name,
            )
        self.api_key = api_key
        self.retry_policy = retry_policy or self._default_retry_policy()
        self.prompt_builder = prompt_builder or PromptBuilder()

    def _default_retry_policy(self) -> RetryPolicy:
        return default_retry_policy(self.name)

    def resolve_model(self, options: Optional[GenerationOptions] = None) -> str:
        """Explicit model > reasoning variant (when max_tokens is set) > default."""
        if options is not None:
            if options.model:
                return options.model
            if options.max_tokens and self.reasoning_model:
                return self.reasoning_model
        return self.default_model

    def search_enabled(self, options: Optional[GenerationOptions] = None) -> bool:
        if not self.supports_search:
            return False
        return options is None or options.enable_search is not False

    def max_tokens(self, options: Optional[GenerationOptions] = None) -> int:
        if options is not None and options.max_tokens:
            return options.max_tokens
        return settings.GENERATION_MAX_TOKENS

    async def generate_infographic(
        self,
        topic: str,
        on_partial: Optional[PartialCallback] = None,
        options: Optional[GenerationOptions] = None,
    ) -> Report:
        """
        Generate a report for ``topic``.

        Args:
            topic: Free-text subject of the report
            on_partial: Called with each displayable snapshot, in stream order
            options: Per-request overrides

        Raises:
            GenerationFailedError: when every attempt failed
        """
        options = options or GenerationOptions()
        model = self.resolve_model(options)
        system_instruction = self.prompt_builder.build_system_instruction(
            section_count=options.section_count,
            language=options.language,
            include_few_shot=options.include_few_shot,
        )
        user_instruction = self.prompt_builder.build_user_instruction(topic)

        logger.info(
            f"[{self.name.upper()}] Generating report: model={model}, "
            f"search={self.search_enabled(options)}, topic={topic[:80]!r}"
        )

        async def attempt(attempt_number: int) -> Report:
            return await self._run_attempt(
                model, system_instruction, user_instruction, options, on_partial
            )

        return await self.retry_policy.run(attempt)

    async def _run_attempt(
        self,
        model: str,
        system_instruction: str,
        user_instruction: str,
        options: GenerationOptions,
        on_partial: Optional[PartialCallback],
    ) -> Report:
        accumulator = StreamAccumulator(on_partial=on_partial)
        sources: List[Dict[str, str]] = []

        async for chunk in self._stream(model, system_instruction, user_instruction, options):
            if chunk.text:
                accumulator.feed(chunk.text)
            if chunk.sources:
                sources.extend(chunk.sources)

        logger.info(
            f"[{self.name.upper()}] Stream complete: {len(accumulator.full_text)} chars, "
            f"{accumulator.deltas_received} deltas, {accumulator.partials_emitted} partials"
        )
        report = accumulator.finalize()
        return merge_sources(report, sources)

    @abstractmethod
    def _stream(
        self,
        model: str,
        system_instruction: str,
        user_instruction: str,
        options: GenerationOptions,
    ) -> AsyncIterator[StreamChunk]:
        """Open one backend stream and yield its chunks."""

    async def close(self) -> None:
        """Release backend resources. Safe to call more than once."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
