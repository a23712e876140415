"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from samcut_backend.config import settings
from samcut_backend.dependencies import get_sam_service, get_session_registry
from samcut_backend.routes import sessions_router
from samcut_backend.schemas import HealthResponse
from samcut_backend.services import SamService
from samcut_backend.session import ModelLoadError

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: load the model on startup, close sessions on shutdown."""
    if settings.load_model_on_startup:
        try:
            get_sam_service().load_model()
        except ModelLoadError:
            # Remembered by the service and reported by /health and /sessions
            logger.error("Starting without a segmentation model")

    yield

    get_session_registry().clear()


app = FastAPI(
    title="samcut API",
    description="Interactive point-prompt segmentation sessions with cut-out export",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sessions_router)


@app.get("/health", response_model=HealthResponse)
def health_check(sam: SamService = Depends(get_sam_service)) -> HealthResponse:
    """Health check endpoint with model status."""
    error = sam.load_error
    return HealthResponse(
        status="healthy" if error is None else "degraded",
        sam_model=sam.model_name,
        sam_loaded=sam.is_loaded,
        sam_error=str(error) if error is not None else None,
    )
