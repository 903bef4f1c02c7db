"""
Provider API keys.

A key set at runtime (through the API) wins over the ``<PROVIDER>_API_KEY``
setting. Runtime keys live in process memory only.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from infographix.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or default_settings
        self._runtime_keys: Dict[str, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def env_var_name(provider_id: str) -> str:
        """``gemini`` -> ``GEMINI_API_KEY``"""
        return f"{provider_id.strip().upper()}_API_KEY"

    def get(self, provider_id: str) -> Optional[str]:
        provider_id = provider_id.strip().lower()
        with self._lock:
            runtime_key = self._runtime_keys.get(provider_id)
        if runtime_key:
            return runtime_key
        return getattr(self._settings, self.env_var_name(provider_id), None) or None

    def set(self, provider_id: str, api_key: str) -> None:
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValueError("API key must not be empty")
        with self._lock:
            self._runtime_keys[provider_id.strip().lower()] = api_key
        logger.info(f"[CREDENTIALS] Runtime API key set for {provider_id}")

    def clear(self, provider_id: str) -> bool:
        """Drop the runtime key. Returns whether one was set."""
        with self._lock:
            removed = self._runtime_keys.pop(provider_id.strip().lower(), None)
        if removed:
            logger.info(f"[CREDENTIALS] Runtime API key cleared for {provider_id}")
        return removed is not None

    def has(self, provider_id: str) -> bool:
        return bool(self.get(provider_id))


# Global store instance
credential_store = CredentialStore()
