"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ux_pulse.adapters.memory_repository import InMemoryWorkspaceRepository
from ux_pulse.adapters.openai_analysis_client import OpenAIAnalysisClient
from ux_pulse.adapters.opencv_decoder import OpenCvVideoDecoder
from ux_pulse.config import Settings
from ux_pulse.services.analysis import AnalysisService
from ux_pulse.services.frames import FrameExtractor
from ux_pulse.services.sessions import SessionService
from ux_pulse.services.workspace import WorkspaceService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    workspace_service: WorkspaceService
    session_service: SessionService
    analysis_service: AnalysisService
    frame_extractor: FrameExtractor
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    repository = InMemoryWorkspaceRepository()
    openai_client = (
        OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    analysis_service = AnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    frame_extractor = FrameExtractor(
        decoder_factory=OpenCvVideoDecoder.open,
        max_frames=resolved_settings.max_video_frames,
    )
    session_service = SessionService(
        repository=repository,
        analysis_service=analysis_service,
        frame_extractor=frame_extractor,
    )
    workspace_service = WorkspaceService(repository)

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        workspace_service=workspace_service,
        session_service=session_service,
        analysis_service=analysis_service,
        frame_extractor=frame_extractor,
        close_resources=close_resources,
    )
