from fastapi import APIRouter

from infographix.core.config import settings
from infographix.llm.providers.factory import provider_factory
from infographix.registry.section_registry import section_registry

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness plus a summary of which providers have credentials."""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "default_provider": provider_factory.default_provider(),
        "providers": {
            info.id: provider_factory.has_api_key(info.id)
            for info in provider_factory.list_providers()
        },
        "section_types": len(section_registry),
    }
