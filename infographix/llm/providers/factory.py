"""Provider factory: static provider and model tables plus construction."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Type

from infographix.core.config import settings
from infographix.core.credentials import CredentialStore, credential_store
from infographix.core.exceptions import ConfigurationError, UnknownProviderError
from infographix.llm.providers.base import BaseProvider
from infographix.llm.providers.deepseek import DeepSeekProvider
from infographix.llm.providers.gemini import GeminiProvider
from infographix.llm.providers.openai import OpenAIProvider
from infographix.llm.providers.openrouter import OpenRouterProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderInfo:
    id: str
    name: str
    default_model: str
    supports_search: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    free: Optional[bool] = None

    def to_dict(self) -> dict:
        return asdict(self)


PROVIDER_CLASSES: Dict[str, Type[BaseProvider]] = {
    "gemini": GeminiProvider,
    "deepseek": DeepSeekProvider,
    "openrouter": OpenRouterProvider,
    "openai": OpenAIProvider,
}

PROVIDER_MODELS: Dict[str, List[ModelInfo]] = {
    "openrouter": [
        ModelInfo("google/gemini-2.5-flash", "Gemini 2.5 Flash"),
        ModelInfo("google/gemini-3-flash-preview", "Gemini 3 Flash Preview"),
        ModelInfo("x-ai/grok-4.1-fast", "Grok 4.1 Fast"),
        ModelInfo("google/gemini-2.5-flash-lite", "Gemini 2.5 Flash Lite"),
        ModelInfo("google/gemini-2.0-flash-001", "Gemini 2.0 Flash"),
        ModelInfo("google/gemini-3-pro-preview", "Gemini 3 Pro Preview"),
        ModelInfo("openai/gpt-4o-mini", "GPT-4o Mini"),
        ModelInfo("openai/gpt-4o", "GPT-4o"),
        ModelInfo("openai/o1-mini", "o1 Mini"),
        ModelInfo("qwen/qwen-2.5-72b-instruct", "Qwen 2.5 72B"),
        ModelInfo("qwen/qwen3-vl-235b-a22b-instruct", "Qwen3 VL 235B"),
        ModelInfo("meta-llama/llama-4-maverick", "Llama 4 Maverick"),
        ModelInfo("meta-llama/llama-3.1-70b-instruct", "Llama 3.1 70B"),
        ModelInfo("microsoft/phi-3-medium-128k-instruct", "Phi-3 Medium 128K"),
        ModelInfo("deepseek/deepseek-chat", "DeepSeek Chat"),
        ModelInfo("deepseek/deepseek-reasoner", "DeepSeek Reasoner"),
    ],
    "gemini": [
        ModelInfo("gemini-2.0-flash-exp", "Gemini 2.0 Flash (Default)"),
        ModelInfo("gemini-2.5-pro", "Gemini 2.5 Pro"),
        ModelInfo("gemini-1.5-pro", "Gemini 1.5 Pro"),
    ],
    "deepseek": [
        ModelInfo("deepseek-chat", "DeepSeek Chat (Default)"),
        ModelInfo("deepseek-reasoner", "DeepSeek Reasoner"),
    ],
    "openai": [
        ModelInfo("gpt-4o-mini", "GPT-4o Mini (Default)"),
        ModelInfo("gpt-4o", "GPT-4o"),
        ModelInfo("gpt-4o-2024-11-20", "GPT-4o (Latest)"),
        ModelInfo("o1-mini", "o1 Mini"),
    ],
}


class ProviderFactory:
    """
    Builds provider adapters by id.

    Unknown ids are rejected before any credential lookup, so a typo never
    reads as a missing key.
    """

    def __init__(self, credentials: Optional[CredentialStore] = None) -> None:
        self.credentials = credentials if credentials is not None else credential_store

    @staticmethod
    def _normalize(provider_id: Optional[str]) -> str:
        return (provider_id or "").strip().lower()

    def create(self, provider_id: Optional[str] = None, api_key: Optional[str] = None, **kwargs) -> BaseProvider:
        """
        Create an adapter.

        Args:
            provider_id: Provider id; defaults to ``default_provider()``
            api_key: Explicit key; otherwise looked up in the credential store
            **kwargs: Passed through to the adapter constructor

        Raises:
            UnknownProviderError: ``provider_id`` is not registered
            ConfigurationError: no API key available
        """
        pid = self._normalize(provider_id) or self.default_provider()
        provider_class = PROVIDER_CLASSES.get(pid)
        if provider_class is None:
            logger.error(f"[FACTORY] Unknown provider: {pid}")
            raise UnknownProviderError(pid, available=list(PROVIDER_CLASSES))

        key = api_key or self.credentials.get(pid)
        if not key:
            logger.warning(f"[FACTORY] No API key for provider {pid}")
            raise ConfigurationError(
                f"{provider_class.display_name} API key is not configured. "
                f"Set {self.credentials.env_var_name(pid)} or provide a key at runtime.",
                provider=pid,
            )

        logger.info(f"[FACTORY] Creating provider {pid}")
        return provider_class(key, **kwargs)

    def list_providers(self) -> List[ProviderInfo]:
        return [
            ProviderInfo(
                id=pid,
                name=cls.display_name,
                default_model=cls.default_model,
                supports_search=cls.supports_search,
            )
            for pid, cls in PROVIDER_CLASSES.items()
        ]

    def get_provider_info(self, provider_id: str) -> ProviderInfo:
        pid = self._normalize(provider_id)
        for info in self.list_providers():
            if info.id == pid:
                return info
        raise UnknownProviderError(pid, available=list(PROVIDER_CLASSES))

    def list_models(self, provider_id: str) -> List[ModelInfo]:
        """Known models for a provider. Unknown ids yield an empty list."""
        return list(PROVIDER_MODELS.get(self._normalize(provider_id), []))

    def is_known(self, provider_id: str) -> bool:
        return self._normalize(provider_id) in PROVIDER_CLASSES

    def default_provider(self) -> str:
        return settings.DEFAULT_PROVIDER

    def has_api_key(self, provider_id: str) -> bool:
        return self.credentials.has(self._normalize(provider_id))


provider_factory = ProviderFactory()
