"""
Infographic API routes.

Endpoints for generating infographic reports (whole or streamed as
server-sent events), managing provider credentials and browsing the
generation history.
"""

from __future__ import annotations

import json
import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from infographix.core.exceptions import NotFoundError, UnknownProviderError, ValidationError
from infographix.llm.providers.base import GenerationOptions
from infographix.llm.providers.factory import ProviderFactory, provider_factory
from infographix.registry.section_registry import section_registry
from infographix.schemas.infographic import (
    ApiKeyRequest,
    ApiKeyStatusResponse,
    GenerateRequest,
    HistoryItemResponse,
    MessageResponse,
    ModelResponse,
    ProviderResponse,
    SectionTypeResponse,
)
from infographix.services.infographic_service import InfographicService, get_infographic_service

router = APIRouter(prefix="/infographic", tags=["infographic"])
logger = logging.getLogger(__name__)


def get_provider_factory() -> ProviderFactory:
    return provider_factory


def _options_from_request(req: GenerateRequest) -> GenerationOptions:
    return GenerationOptions(
        model=req.model,
        language=req.language.value,
        enable_search=req.enable_search,
        max_tokens=req.max_tokens,
        section_count=req.section_count,
        include_few_shot=req.include_few_shot,
    )


def _require_known_provider(factory: ProviderFactory, provider_id: str) -> str:
    if not factory.is_known(provider_id):
        raise UnknownProviderError(provider_id, available=[p.id for p in factory.list_providers()])
    return provider_id.strip().lower()


# ============== Providers ==============

@router.get("/providers", response_model=List[ProviderResponse])
async def list_providers(factory: ProviderFactory = Depends(get_provider_factory)):
    """List available providers and whether each has an API key."""
    return [
        ProviderResponse(**info.to_dict(), has_api_key=factory.has_api_key(info.id))
        for info in factory.list_providers()
    ]


@router.get("/providers/{provider_id}/models", response_model=List[ModelResponse])
async def list_models(provider_id: str, factory: ProviderFactory = Depends(get_provider_factory)):
    """List the known models of a provider."""
    _require_known_provider(factory, provider_id)
    return [ModelResponse(**model.to_dict()) for model in factory.list_models(provider_id)]


@router.put("/providers/{provider_id}/api-key", response_model=ApiKeyStatusResponse)
async def set_api_key(
    provider_id: str,
    req: ApiKeyRequest,
    factory: ProviderFactory = Depends(get_provider_factory),
):
    """Store an API key for this process. It takes priority over the environment."""
    pid = _require_known_provider(factory, provider_id)
    try:
        factory.credentials.set(pid, req.api_key)
    except ValueError as e:
        raise ValidationError(str(e), field="api_key")
    return ApiKeyStatusResponse(provider=pid, has_api_key=True)


@router.delete("/providers/{provider_id}/api-key", response_model=ApiKeyStatusResponse)
async def clear_api_key(provider_id: str, factory: ProviderFactory = Depends(get_provider_factory)):
    """Forget the runtime API key; an environment key, if any, applies again."""
    pid = _require_known_provider(factory, provider_id)
    factory.credentials.clear(pid)
    return ApiKeyStatusResponse(provider=pid, has_api_key=factory.has_api_key(pid))


@router.get("/section-types", response_model=List[SectionTypeResponse])
async def list_section_types():
    """Registered section types and their field contracts."""
    return [SectionTypeResponse(**definition.to_dict()) for definition in section_registry.get_all()]


# ============== Generation ==============

@router.post("/generate", response_model=HistoryItemResponse)
async def generate_infographic(
    req: GenerateRequest,
    service: InfographicService = Depends(get_infographic_service),
):
    """
    Generate a complete report.

    Returns the new history item once the model has finished. Fails with
    PROVIDER_NOT_CONFIGURED (400) when no API key is available and with
    GENERATION_FAILED (502) when every attempt failed.
    """
    logger.info(f"[INFOGRAPHIC API] Generate request: {req.topic[:100]}, provider={req.provider or 'default'}")
    item = await service.generate(
        req.topic,
        provider_id=req.provider,
        options=_options_from_request(req),
    )
    return item.to_dict()


@router.post("/stream")
async def stream_infographic(
    req: GenerateRequest,
    service: InfographicService = Depends(get_infographic_service),
):
    """
    Generate a report as server-sent events.

    Each event is ``data: <json>``: ``partial`` snapshots while the model
    writes, then one ``final`` (with the history item) or ``error`` event.
    Provider and credential problems are reported before the stream opens.
    """
    logger.info(f"[INFOGRAPHIC API] Stream request: {req.topic[:100]}, provider={req.provider or 'default'}")
    provider = service.get_provider(req.provider)

    async def event_stream():
        async for event in service.stream(
            req.topic,
            options=_options_from_request(req),
            provider=provider,
        ):
            yield f"data: {json.dumps(event, ensure_ascii=False)}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        # Covers clients that disconnect before the body is iterated
        background=BackgroundTask(provider.close),
    )


# ============== History ==============

@router.get("/history", response_model=List[HistoryItemResponse])
async def list_history(service: InfographicService = Depends(get_infographic_service)):
    """Generated reports, newest first."""
    return [item.to_dict() for item in service.history.list()]


@router.get("/history/{item_id}", response_model=HistoryItemResponse)
async def get_history_item(item_id: str, service: InfographicService = Depends(get_infographic_service)):
    item = service.history.get(item_id)
    if item is None:
        raise NotFoundError("History item", item_id)
    return item.to_dict()


@router.delete("/history", response_model=MessageResponse)
async def clear_history(service: InfographicService = Depends(get_infographic_service)):
    service.history.clear()
    return MessageResponse(message="History cleared")
