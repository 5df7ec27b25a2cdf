"""Inference gateway that turns a workflow into a UX analysis report."""

import base64
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from ux_pulse.domain.assets import SourceAsset, SourceKind
from ux_pulse.domain.errors import (
    InferenceError,
    InvalidAnalysisFormat,
    MissingCredentials,
    UxPulseError,
)
from ux_pulse.domain.reports import AnalysisReport
from ux_pulse.domain.workflows import Persona
from ux_pulse.services.prompts import build_initial_prompt, build_refinement_prompt

_LEVEL = {"type": "string", "enum": ["High", "Medium", "Low"]}
_SCREEN_INDEX = {
    "type": "integer",
    "minimum": 0,
    "description": "The 0-based index of the screen this entry applies to.",
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "overallScore": {
            "type": "number",
            "minimum": 1,
            "maximum": 10,
            "description": "Overall score for the flow from 1 to 10.",
        },
        "generalAnalysis": {
            "type": "string",
            "description": "Markdown summary of strengths and weaknesses.",
        },
        "positivePoints": {"type": "array", "items": {"type": "string"}},
        "recommendations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "screenIndex": _SCREEN_INDEX,
                    "impact": _LEVEL,
                    "effort": _LEVEL,
                },
                "required": ["title", "description", "screenIndex", "impact", "effort"],
                "additionalProperties": False,
            },
        },
        "benchmarks": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "company": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["company", "description"],
                "additionalProperties": False,
            },
        },
        "accessibilityReport": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "recommendation": {"type": "string"},
                    "screenIndex": _SCREEN_INDEX,
                    "severity": {
                        "type": "string",
                        "enum": ["Critical", "Serious", "Moderate", "Minor"],
                    },
                },
                "required": [
                    "title",
                    "description",
                    "recommendation",
                    "screenIndex",
                    "severity",
                ],
                "additionalProperties": False,
            },
        },
    },
    "required": [
        "overallScore",
        "generalAnalysis",
        "positivePoints",
        "recommendations",
        "benchmarks",
        "accessibilityReport",
    ],
    "additionalProperties": False,
}

_INVALID_FORMAT_MESSAGE = "The AI returned an invalid analysis format. Please try again."

_logger = logging.getLogger(__name__)


class AnalysisClient(Protocol):
    """Interface for the multimodal inference service."""

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
        """Return the raw text of a structured analysis response."""


@dataclass(frozen=True)
class Refinement:
    """Context for replacing an existing report."""

    previous_report: AnalysisReport
    feedback: str


@dataclass
class AnalysisService:
    """Builds analysis requests and validates the returned report."""

    client: AnalysisClient | None
    model: str
    temperature: float | None = 0.2
    reasoning_effort: str | None = None
    store: bool = False

    async def analyze(
        self,
        screens: Sequence[SourceAsset],
        objective: str,
        source_kind: SourceKind,
        persona: Persona,
        refinement: Refinement | None = None,
    ) -> AnalysisReport:
        """Run one analysis call; never retried."""
        if self.client is None:
            raise MissingCredentials(
                "OpenAI API key is missing. Set the OPENAI_API_KEY environment variable."
            )
        image_data_urls = [_to_data_url(screen) for screen in screens]
        if refinement is None:
            prompt = build_initial_prompt(objective, source_kind, persona)
        else:
            prompt = build_refinement_prompt(
                objective, persona, refinement.previous_report, refinement.feedback
            )
        try:
            raw = await self.client.analyze(
                model=self.model,
                prompt=prompt,
                image_data_urls=image_data_urls,
                schema=ANALYSIS_SCHEMA,
                temperature=self.temperature,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
            )
        except UxPulseError:
            raise
        except Exception as exc:
            _logger.warning("Analysis request failed: %s", exc)
            raise InferenceError(str(exc) or "The analysis request failed.") from exc
        return parse_report(raw)


def parse_report(raw: str) -> AnalysisReport:
    """Parse raw response text into a report or raise InvalidAnalysisFormat."""
    try:
        payload = json.loads(raw.strip())
        return AnalysisReport.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        _logger.warning("Failed to parse analysis response: %.500s", raw)
        raise InvalidAnalysisFormat(_INVALID_FORMAT_MESSAGE) from exc


def _to_data_url(asset: SourceAsset) -> str:
    """Convert a screen to a base64 data URL for image input."""
    encoded = base64.b64encode(asset.data).decode("utf-8")
    return f"data:{asset.mime_type};base64,{encoded}"
