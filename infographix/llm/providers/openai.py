from __future__ import annotations

from infographix.core.config import settings
from infographix.llm.providers.openai_compatible import OpenAICompatibleProvider


class OpenAIProvider(OpenAICompatibleProvider):
    name = "openai"
    display_name = "OpenAI"
    default_model = "gpt-4o-mini"
    api_key_setting = "OPENAI_API_KEY"
    base_url = settings.OPENAI_BASE_URL
