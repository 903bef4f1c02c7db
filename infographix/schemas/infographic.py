from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from infographix.llm.prompts.languages import Language


# ============== Requests ==============

class GenerateRequest(BaseModel):
    """Request to generate an infographic report."""
    topic: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Subject of the report (e.g., 'History of the Roman Empire')",
    )
    provider: Optional[str] = Field(None, description="Provider id; defaults to DEFAULT_PROVIDER")
    model: Optional[str] = Field(None, description="Model id; defaults to the provider's default")
    language: Language = Field(Language.EN, description="Output language")
    enable_search: Optional[bool] = Field(None, description="Search grounding for capable providers (on by default)")
    max_tokens: Optional[int] = Field(None, ge=256, le=65536, description="Output token budget")
    section_count: Optional[int] = Field(None, ge=1, le=20, description="Exact number of sections")
    include_few_shot: bool = Field(True, description="Include worked examples in the prompt")

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Topic must not be empty")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "topic": "The global semiconductor supply chain",
                "provider": "gemini",
                "language": "en",
                "section_count": 5,
            }
        }
    }


class ApiKeyRequest(BaseModel):
    api_key: str = Field(..., min_length=1, description="Provider API key")


# ============== Responses ==============

class HistoryItemResponse(BaseModel):
    id: str
    query: str
    timestamp: int
    provider: Optional[str] = None
    # Stored verbatim; section shapes are not validated here
    report: Dict[str, Any]


class ProviderResponse(BaseModel):
    id: str
    name: str
    default_model: str
    supports_search: bool
    has_api_key: bool


class ModelResponse(BaseModel):
    id: str
    name: str
    free: Optional[bool] = None


class SectionTypeResponse(BaseModel):
    type: str
    display_name: str
    category: str
    renderer: str
    required_fields: List[str]
    optional_fields: List[str]
    forbidden_fields: List[str]


class ApiKeyStatusResponse(BaseModel):
    provider: str
    has_api_key: bool


class MessageResponse(BaseModel):
    message: str
    details: Optional[Any] = None
