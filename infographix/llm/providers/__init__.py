"""
LLM provider adapters.

All adapters share one contract::

    provider = provider_factory.create("gemini")
    report = await provider.generate_infographic(topic, on_partial=render)
"""

from infographix.llm.providers.base import BaseProvider, GenerationOptions, StreamChunk, merge_sources
from infographix.llm.providers.deepseek import DeepSeekProvider
from infographix.llm.providers.gemini import GeminiProvider
from infographix.llm.providers.openai import OpenAIProvider
from infographix.llm.providers.openrouter import OpenRouterProvider
from infographix.llm.providers.factory import (
    ModelInfo,
    ProviderFactory,
    ProviderInfo,
    provider_factory,
)

__all__ = [
    "BaseProvider",
    "GenerationOptions",
    "StreamChunk",
    "merge_sources",
    "DeepSeekProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "ModelInfo",
    "ProviderFactory",
    "ProviderInfo",
    "provider_factory",
]
