from __future__ import annotations

from infographix.core.config import settings
from infographix.llm.providers.openai_compatible import OpenAICompatibleProvider


class OpenRouterProvider(OpenAICompatibleProvider):
    """Routes to many upstream models; ids look like ``vendor/model``."""

    name = "openrouter"
    display_name = "OpenRouter"
    default_model = "google/gemini-2.5-flash"
    api_key_setting = "OPENROUTER_API_KEY"
    base_url = settings.OPENROUTER_BASE_URL

    def _get_headers(self) -> dict:
        headers = super()._get_headers()
        # Attribution shown on the OpenRouter dashboard
        headers["HTTP-Referer"] = settings.OPENROUTER_REFERER
        headers["X-Title"] = settings.OPENROUTER_TITLE
        return headers
