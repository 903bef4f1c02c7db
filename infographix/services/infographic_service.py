from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Any, AsyncIterator, Dict, Optional

from infographix.core.exceptions import GENERIC_ERROR_MESSAGE, InfographixException, ValidationError
from infographix.llm.providers.base import BaseProvider, GenerationOptions
from infographix.llm.providers.factory import ProviderFactory, provider_factory
from infographix.llm.streaming import PartialCallback, Report
from infographix.services.history_service import HistoryItem, HistoryStore, get_history_store

logger = logging.getLogger(__name__)

TERMINAL_EVENTS = ("final", "error")


class InfographicService:
    """
    Generates infographic reports through the configured providers.

    ``generate`` returns the finished history item. ``stream`` yields
    progress events while the model is still writing:

        {"type": "partial", "report": {...}}   # zero or more, in stream order
        {"type": "final", "item": {...}}       # or
        {"type": "error", "code": "...", "message": "..."}
    """

    def __init__(
        self,
        factory: Optional[ProviderFactory] = None,
        history: Optional[HistoryStore] = None,
    ):
        self.factory = factory if factory is not None else provider_factory
        self.history = history if history is not None else get_history_store()

    @staticmethod
    def _clean_topic(topic: str) -> str:
        topic = (topic or "").strip()
        if not topic:
            raise ValidationError("Topic must not be empty", field="topic")
        return topic

    def get_provider(self, provider_id: Optional[str] = None) -> BaseProvider:
        """
        Build the adapter for ``provider_id``.

        Raises:
            UnknownProviderError, ConfigurationError
        """
        return self.factory.create(provider_id or self.factory.default_provider())

    async def generate(
        self,
        topic: str,
        provider_id: Optional[str] = None,
        options: Optional[GenerationOptions] = None,
        on_partial: Optional[PartialCallback] = None,
        provider: Optional[BaseProvider] = None,
    ) -> HistoryItem:
        """
        Generate a report and record it in the history.

        Args:
            topic: Subject of the report
            provider_id: Provider to use (default provider when omitted)
            options: Per-request generation options
            on_partial: Receives displayable snapshots while streaming
            provider: Already-built adapter; ``provider_id`` is ignored when given.
                Closed when generation ends, including when the topic is rejected.
        """
        try:
            topic = self._clean_topic(topic)
            provider = provider or self.get_provider(provider_id)
            start_time = time.time()

            logger.info(f"[INFOGRAPHIC] Generating report with {provider.name}: {topic[:100]}")
            report = await provider.generate_infographic(topic, on_partial=on_partial, options=options)
        finally:
            if provider is not None:
                await provider.close()

        item = HistoryItem(query=topic, report=report, provider=provider.name)
        self.history.add(item)

        total_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(
            f"[INFOGRAPHIC] Report ready in {total_ms}ms: "
            f"{len(report.get('sections') or [])} sections, {len(report.get('sources') or [])} sources"
        )
        return item

    async def stream(
        self,
        topic: str,
        provider_id: Optional[str] = None,
        options: Optional[GenerationOptions] = None,
        provider: Optional[BaseProvider] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """
        Generate a report, yielding events as snapshots arrive.

        Exactly one terminal event (``final`` or ``error``) ends the stream.
        Closing the iterator early cancels the generation. An injected
        ``provider`` is closed when the stream ends, however it ends.
        """
        queue: asyncio.Queue = asyncio.Queue()

        def on_partial(report: Report) -> None:
            queue.put_nowait({"type": "partial", "report": report})

        async def run() -> None:
            try:
                item = await self.generate(
                    topic,
                    provider_id=provider_id,
                    options=options,
                    on_partial=on_partial,
                    provider=provider,
                )
                queue.put_nowait({"type": "final", "item": item.to_dict()})
            except InfographixException as e:
                logger.warning(f"[INFOGRAPHIC] Stream failed: {e.code} - {e.message}")
                queue.put_nowait({"type": "error", "code": e.code, "message": e.message})
            except Exception as e:
                logger.error(f"[INFOGRAPHIC] Unexpected stream failure: {e}", exc_info=True)
                queue.put_nowait({
                    "type": "error",
                    "code": "INTERNAL_ERROR",
                    "message": GENERIC_ERROR_MESSAGE,
                })

        task = asyncio.create_task(run())
        try:
            while True:
                event = await queue.get()
                yield event
                if event["type"] in TERMINAL_EVENTS:
                    break
        finally:
            if not task.done():
                logger.info("[INFOGRAPHIC] Stream abandoned, cancelling generation")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            if provider is not None:
                await provider.close()


# Singleton instance
_infographic_service: Optional[InfographicService] = None


def get_infographic_service() -> InfographicService:
    """Get or create the infographic service singleton."""
    global _infographic_service
    if _infographic_service is None:
        _infographic_service = InfographicService()
    return _infographic_service
