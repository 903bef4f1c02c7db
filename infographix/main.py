from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from infographix.core.config import settings
from infographix.core.logging import setup_logging
from infographix.core.exceptions import register_exception_handlers
from infographix.registry.core_sections import register_core_section_types
from infographix.registry.section_registry import section_registry
from infographix.api.routes.health import router as health_router
from infographix.api.routes.infographic import router as infographic_router
from infographix.llm.providers.factory import provider_factory

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Registers section types before the first request is served.
    """
    logger.info(f"{settings.APP_NAME} starting up...")

    register_core_section_types()
    logger.info(f"Section types registered: {', '.join(section_registry.get_type_names())}")

    configured = [p.id for p in provider_factory.list_providers() if provider_factory.has_api_key(p.id)]
    if configured:
        logger.info(f"Providers with API keys: {', '.join(configured)}")
    else:
        logger.warning("No provider API keys configured; keys can be set through the API")

    yield

    logger.info(f"{settings.APP_NAME} shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url="/docs" if settings.ENV == "development" else None,
    redoc_url="/redoc" if settings.ENV == "development" else None,
    openapi_url="/openapi.json" if settings.ENV == "development" else None,
)

# Register custom exception handlers for standardized error responses
register_exception_handlers(app)

# CORS middleware to allow frontend requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(
    health_router,
    prefix=settings.API_V1_PREFIX,
    tags=["Health"],
)

app.include_router(
    infographic_router,
    prefix=settings.API_V1_PREFIX,
    tags=["Infographic"],
)


@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME} is running"}
