"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field

import pytest

from ux_pulse.adapters.memory_repository import InMemoryWorkspaceRepository
from ux_pulse.config import Settings
from ux_pulse.containers import AppContainer
from ux_pulse.domain.assets import SourceAsset
from ux_pulse.services.analysis import AnalysisClient, AnalysisService
from ux_pulse.services.frames import FrameExtractor, VideoDecoder
from ux_pulse.services.sessions import SessionService
from ux_pulse.services.workspace import WorkspaceService

PNG_HEADER = b"\x89PNG\r\n\x1a\n"

REPORT_PAYLOAD: dict[str, object] = {
    "overallScore": 7.5,
    "generalAnalysis": "Clear flow with a cluttered sign-up form.",
    "positivePoints": ["Consistent branding", "Short path to value"],
    "recommendations": [
        {
            "title": "Collapse optional fields",
            "description": "Hide optional fields behind a toggle.",
            "screenIndex": 1,
            "impact": "High",
            "effort": "Low",
        },
        {
            "title": "Rebuild plan picker",
            "description": "Use a comparison table.",
            "screenIndex": 3,
            "impact": "Medium",
            "effort": "High",
        },
    ],
    "benchmarks": [
        {"company": "Duolingo", "description": "Defers sign-up until after a lesson."}
    ],
    "accessibilityReport": [
        {
            "title": "Low contrast text",
            "description": "Grey helper text fails 4.5:1.",
            "recommendation": "Darken helper text.",
            "screenIndex": 0,
            "severity": "Serious",
        }
    ],
}


def report_json(**overrides: object) -> str:
    """Return the canned report as response text, with top-level overrides."""
    return json.dumps({**REPORT_PAYLOAD, **overrides})


def make_screens(count: int) -> list[SourceAsset]:
    return [
        SourceAsset(
            name=f"{index + 1:02d}_screen.png",
            mime_type="image/png",
            data=PNG_HEADER + bytes([index]),
        )
        for index in range(count)
    ]


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake inference client replaying queued responses.

    Queued exceptions are raised instead of returned. When ``gate`` is set
    the call waits on it, which keeps a workflow in flight.
    """

    responses: list[str | Exception] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        prompt: str,
        image_data_urls: list[str],
        schema: dict[str, object],
        temperature: float | None,
        reasoning_effort: str | None,
        store: bool,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "image_data_urls": image_data_urls,
                "schema": schema,
                "temperature": temperature,
                "reasoning_effort": reasoning_effort,
                "store": store,
            }
        )
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0) if self.responses else report_json()
        if isinstance(response, Exception):
            raise response
        return response


@dataclass
class FakeVideoDecoder(VideoDecoder):
    """Decoder producing one synthetic PNG per seek."""

    video_duration: float
    fail_at: int | None = None
    seeks: list[float] = field(default_factory=list)
    closed: bool = False

    @property
    def duration(self) -> float:
        return self.video_duration

    def seek(self, seconds: float) -> None:
        self.seeks.append(seconds)

    def read_frame(self) -> bytes | None:
        if self.fail_at is not None and len(self.seeks) > self.fail_at:
            return None
        return PNG_HEADER + f"{self.seeks[-1]:.3f}".encode()

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeDecoderFactory:
    """Hands out fake decoders and remembers them."""

    video_duration: float = 5.0
    fail_at: int | None = None
    decoders: list[FakeVideoDecoder] = field(default_factory=list)

    def __call__(self, asset: SourceAsset) -> FakeVideoDecoder:
        decoder = FakeVideoDecoder(
            video_duration=self.video_duration, fail_at=self.fail_at
        )
        self.decoders.append(decoder)
        return decoder


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def decoder_factory() -> FakeDecoderFactory:
    return FakeDecoderFactory()


@pytest.fixture
def repository() -> InMemoryWorkspaceRepository:
    return InMemoryWorkspaceRepository()


@pytest.fixture
def analysis_service(
    settings: Settings, analysis_client: FakeAnalysisClient
) -> AnalysisService:
    return AnalysisService(
        client=analysis_client,
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )


@pytest.fixture
def frame_extractor(decoder_factory: FakeDecoderFactory) -> FrameExtractor:
    return FrameExtractor(decoder_factory=decoder_factory)


@pytest.fixture
def session_service(
    repository: InMemoryWorkspaceRepository,
    analysis_service: AnalysisService,
    frame_extractor: FrameExtractor,
) -> SessionService:
    return SessionService(
        repository=repository,
        analysis_service=analysis_service,
        frame_extractor=frame_extractor,
    )


@pytest.fixture
def workspace_service(repository: InMemoryWorkspaceRepository) -> WorkspaceService:
    return WorkspaceService(repository)


@pytest.fixture
def container(
    settings: Settings,
    workspace_service: WorkspaceService,
    session_service: SessionService,
    analysis_service: AnalysisService,
    frame_extractor: FrameExtractor,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        workspace_service=workspace_service,
        session_service=session_service,
        analysis_service=analysis_service,
        frame_extractor=frame_extractor,
        close_resources=close_resources,
    )
