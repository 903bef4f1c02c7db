"""
Tests for InfographicService: generation, history and event streaming.
"""

import pytest
from unittest.mock import MagicMock

from infographix.core.exceptions import (
    ConfigurationError,
    GenerationFailedError,
    TransientBackendError,
    ValidationError,
)
from infographix.llm.providers.base import GenerationOptions
from infographix.services.history_service import HistoryStore
from infographix.services.infographic_service import InfographicService


# ============== Fixtures ==============

@pytest.fixture
def history():
    return HistoryStore(max_items=10)


@pytest.fixture
def factory():
    mock_factory = MagicMock()
    mock_factory.default_provider.return_value = "scripted"
    return mock_factory


@pytest.fixture
def service(factory, history):
    return InfographicService(factory=factory, history=history)


async def collect(events):
    return [event async for event in events]


# ============== Generate ==============

class TestGenerate:

    @pytest.mark.asyncio
    async def test_generate_records_history(self, service, history, make_provider, report_deltas):
        provider = make_provider(report_deltas)

        item = await service.generate("  Coffee  ", provider=provider)

        assert item.query == "Coffee"
        assert item.provider == "scripted"
        assert item.report["title"] == "Coffee"
        assert [s["type"] for s in item.report["sections"]] == ["text", "pie_chart"]
        assert "sources" not in item.report
        assert history.list() == [item]
        assert provider.closed

    @pytest.mark.asyncio
    async def test_generate_uses_factory(self, service, factory, make_provider, report_deltas):
        factory.create.return_value = make_provider(report_deltas)

        await service.generate("Coffee", provider_id="scripted")

        factory.create.assert_called_once_with("scripted")

    @pytest.mark.asyncio
    async def test_default_provider_when_omitted(self, service, factory, make_provider, report_deltas):
        factory.create.return_value = make_provider(report_deltas)

        await service.generate("Coffee")

        factory.create.assert_called_once_with("scripted")

    @pytest.mark.asyncio
    async def test_partials_forwarded(self, service, make_provider, report_deltas):
        snapshots = []
        provider = make_provider(report_deltas)

        await service.generate("Coffee", provider=provider, on_partial=snapshots.append)

        assert snapshots
        assert all(s["title"] == "Coffee" for s in snapshots)
        assert len(snapshots[-1]["sections"]) == 2

    @pytest.mark.asyncio
    async def test_options_reach_provider(self, service, make_provider, report_deltas):
        provider = make_provider(report_deltas)

        await service.generate("Coffee", provider=provider, options=GenerationOptions(model="custom-model"))

        assert provider.models == ["custom-model"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("topic", ["", "   ", None])
    async def test_empty_topic_rejected(self, service, factory, topic):
        with pytest.raises(ValidationError):
            await service.generate(topic)
        factory.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_topic_closes_injected_provider(self, service, make_provider, report_deltas):
        provider = make_provider(report_deltas)

        with pytest.raises(ValidationError):
            await service.generate("   ", provider=provider)

        assert provider.closed
        assert provider.models == []

    @pytest.mark.asyncio
    async def test_failure_not_recorded(self, service, history, make_provider):
        """A failed generation closes the provider and leaves history untouched."""
        provider = make_provider([TransientBackendError("down")])

        with pytest.raises(GenerationFailedError) as exc_info:
            await service.generate("Coffee", provider=provider)

        assert exc_info.value.attempts == 2
        assert len(history) == 0
        assert provider.closed

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(self, service, factory):
        factory.create.side_effect = ConfigurationError("No key", provider="openai")

        with pytest.raises(ConfigurationError):
            await service.generate("Coffee", provider_id="openai")


# ============== Stream ==============

class TestStream:

    @pytest.mark.asyncio
    async def test_partials_then_final(self, service, history, make_provider, report_deltas):
        provider = make_provider(report_deltas)

        events = await collect(service.stream("Coffee", provider=provider))

        assert events[-1]["type"] == "final"
        assert all(e["type"] == "partial" for e in events[:-1])
        assert len(events) > 1
        final_item = events[-1]["item"]
        assert final_item["query"] == "Coffee"
        assert len(final_item["report"]["sections"]) == 2
        assert history.get(final_item["id"]) is not None

    @pytest.mark.asyncio
    async def test_partials_grow(self, service, make_provider, report_deltas):
        provider = make_provider(report_deltas)

        events = await collect(service.stream("Coffee", provider=provider))

        counts = [len(e["report"]["sections"]) for e in events if e["type"] == "partial"]
        assert counts == sorted(counts)

    @pytest.mark.asyncio
    async def test_error_event(self, service, make_provider):
        provider = make_provider(["not json at all"])

        events = await collect(service.stream("Coffee", provider=provider))

        assert events[-1]["type"] == "error"
        assert events[-1]["code"] == "GENERATION_FAILED"
        assert events[-1]["message"].startswith("Failed after 2 attempts")

    @pytest.mark.asyncio
    async def test_validation_error_event(self, service):
        events = await collect(service.stream("   "))
        assert events == [{
            "type": "error",
            "code": "VALIDATION_ERROR",
            "message": "Topic must not be empty",
        }]

    @pytest.mark.asyncio
    async def test_blank_topic_stream_closes_provider(self, service, make_provider, report_deltas):
        """A rejected topic still releases the provider handed to the stream."""
        provider = make_provider(report_deltas)

        events = await collect(service.stream("   ", provider=provider))

        assert [e["code"] for e in events] == ["VALIDATION_ERROR"]
        assert provider.closed

    @pytest.mark.asyncio
    async def test_unexpected_error_is_masked(self, service, factory):
        factory.create.side_effect = RuntimeError("internal detail")

        events = await collect(service.stream("Coffee"))

        assert events[-1]["code"] == "INTERNAL_ERROR"
        assert "internal detail" not in events[-1]["message"]

    @pytest.mark.asyncio
    async def test_closing_stream_cancels_generation(self, service, history, make_provider, report_deltas):
        """Abandoning the iterator cancels the in-flight backend stream."""
        provider = make_provider(report_deltas[:2], hang=True)

        events = service.stream("Coffee", provider=provider)
        first = await events.__anext__()
        await events.aclose()

        assert first["type"] == "partial"
        assert provider.cancelled
        assert provider.closed
        assert len(history) == 0
