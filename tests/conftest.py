"""
Root pytest configuration for Infographix tests.

Shared fixtures for building reports and stub providers.
"""

import asyncio
import json
from typing import List, Union

import pytest
from unittest.mock import AsyncMock

from infographix.core.retry import RetryPolicy
from infographix.llm.prompt_builder import PromptBuilder
from infographix.llm.providers.base import BaseProvider, StreamChunk
from infographix.registry.core_sections import register_core_section_types
from infographix.registry.section_registry import SectionTypeRegistry


# ============== Shared Fixtures ==============

@pytest.fixture
def core_registry():
    """A fresh registry holding only the built-in section types."""
    registry = SectionTypeRegistry()
    register_core_section_types(registry)
    return registry


@pytest.fixture
def sample_report():
    """A complete, valid report."""
    return {
        "title": "Coffee Around the World",
        "summary": "How coffee is grown, traded and consumed.",
        "sections": [
            {"type": "text", "title": "Origins", "content": "Coffee was first cultivated in Ethiopia."},
            {
                "type": "bar_chart",
                "title": "Top Producers (million bags)",
                "data": [
                    {"name": "Brazil", "value": 66.3},
                    {"name": "Vietnam", "value": 29.0},
                    {"name": "Colombia", "value": 11.5},
                ],
            },
        ],
    }


@pytest.fixture
def sample_report_json(sample_report):
    return json.dumps(sample_report)


# ============== Scripted Provider ==============

class ScriptedProvider(BaseProvider):
    """Provider whose stream replays a fixed list of deltas or errors."""

    name = "scripted"
    display_name = "Scripted"
    default_model = "scripted-1"

    def __init__(self, script: List[Union[str, Exception]], registry, hang: bool = False):
        super().__init__(
            "test-key",
            retry_policy=RetryPolicy(max_attempts=2, name=self.name, sleep=AsyncMock()),
            prompt_builder=PromptBuilder(registry),
        )
        self.script = script
        self.hang = hang
        self.closed = False
        self.cancelled = False
        self.models: List[str] = []

    async def _stream(self, model, system_instruction, user_instruction, options):
        self.models.append(model)
        for step in self.script:
            if isinstance(step, Exception):
                raise step
            yield StreamChunk(text=step)
        if self.hang:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise

    async def close(self):
        self.closed = True


@pytest.fixture
def report_deltas():
    """A report split into stream deltas at awkward points."""
    return [
        '{"title": "Coffee", "summary": "Beans", "sections": [',
        '{"type": "text", "title": "Origins", "content": "Ethiopia"}',
        ', {"type": "pie_chart", "title": "Share", "data": [{"name": "Arabica", "value": 60}]}',
        "]}",
    ]


@pytest.fixture
def make_provider(core_registry):
    """Build a ScriptedProvider bound to the core registry."""
    def _make(script, hang: bool = False) -> ScriptedProvider:
        return ScriptedProvider(script, core_registry, hang=hang)
    return _make
