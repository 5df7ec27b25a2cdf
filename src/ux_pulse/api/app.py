"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ux_pulse.api.workflows import router as workflows_router
from ux_pulse.app_logging import configure_logging
from ux_pulse.containers import AppContainer
from ux_pulse.domain.errors import (
    InferenceError,
    InvalidAnalysisFormat,
    InvalidTransition,
    MissingCredentials,
    ProjectNotFound,
    UxPulseError,
    WorkflowNotFound,
)
from ux_pulse.domain.workflows import Persona
from ux_pulse.services.prompts import PRESET_OBJECTIVES

_ERROR_STATUS: tuple[tuple[type[UxPulseError], int], ...] = (
    (ProjectNotFound, status.HTTP_404_NOT_FOUND),
    (WorkflowNotFound, status.HTTP_404_NOT_FOUND),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (MissingCredentials, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InvalidAnalysisFormat, status.HTTP_502_BAD_GATEWAY),
    (InferenceError, status.HTTP_502_BAD_GATEWAY),
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(workflows_router)

    @app.exception_handler(UxPulseError)
    async def handle_app_error(request: Request, exc: UxPulseError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning("Request failed: path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/personas")
    async def personas() -> dict[str, list[str]]:
        return {"personas": [persona.value for persona in Persona]}

    @app.get("/objectives/presets")
    async def preset_objectives() -> dict[str, list[str]]:
        return {"objectives": list(PRESET_OBJECTIVES)}

    return app


def _status_for(exc: UxPulseError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
