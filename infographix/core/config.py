from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Infographix Engine"
    ENV: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Provider selection
    DEFAULT_PROVIDER: str = "gemini"

    # Provider credentials - may also be supplied at runtime via the API
    GEMINI_API_KEY: Optional[str] = None
    DEEPSEEK_API_KEY: Optional[str] = None
    OPENROUTER_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None

    # OpenAI-compatible endpoints
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com"
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENROUTER_REFERER: str = "https://infographix.ai"
    OPENROUTER_TITLE: str = "InfoGraphix AI"

    # Generation defaults
    GENERATION_MAX_TOKENS: int = 4000
    GENERATION_SECTION_COUNT: int = 5
    GENERATION_LANGUAGE: str = "en"
    GENERATION_MAX_ATTEMPTS: int = 3
    GENERATION_RETRY_BASE_DELAY: float = 1.0  # seconds, multiplied by attempt number

    # HTTP client timeouts (seconds)
    HTTP_CONNECT_TIMEOUT: float = 10.0
    HTTP_READ_TIMEOUT: float = 300.0  # long reports can take minutes to stream
    HTTP_WRITE_TIMEOUT: float = 10.0
    HTTP_POOL_TIMEOUT: float = 10.0

    # Upper bound on grounding citations merged into one report (0 = unbounded)
    GROUNDING_MAX_SOURCES: int = 50

    HISTORY_MAX_ITEMS: int = 50

    @field_validator("DEFAULT_PROVIDER")
    @classmethod
    def normalize_default_provider(cls, v: str) -> str:
        return (v or "gemini").strip().lower()

    @field_validator("GENERATION_MAX_ATTEMPTS")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("GENERATION_MAX_ATTEMPTS must be at least 1")
        return v


settings = Settings()
