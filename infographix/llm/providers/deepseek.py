from __future__ import annotations

from infographix.core.config import settings
from infographix.llm.providers.openai_compatible import OpenAICompatibleProvider


class DeepSeekProvider(OpenAICompatibleProvider):
    name = "deepseek"
    display_name = "DeepSeek"
    default_model = "deepseek-chat"
    # Selected when the caller asks for a larger token budget
    reasoning_model = "deepseek-reasoner"
    api_key_setting = "DEEPSEEK_API_KEY"
    base_url = settings.DEEPSEEK_BASE_URL
