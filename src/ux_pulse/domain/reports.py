"""Models for structured UX analysis reports."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Level = Literal["High", "Medium", "Low"]
Severity = Literal["Critical", "Serious", "Moderate", "Minor"]


class _ReportModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Recommendation(_ReportModel):
    """Actionable change bound to a single screen."""

    title: str
    description: str
    screen_index: int = Field(ge=0)
    impact: Level
    effort: Level


class Benchmark(_ReportModel):
    """Product that solves a related problem well."""

    company: str
    description: str


class AccessibilityIssue(_ReportModel):
    """Accessibility finding bound to a single screen."""

    title: str
    description: str
    recommendation: str
    screen_index: int = Field(ge=0)
    severity: Severity


class AnalysisReport(_ReportModel):
    """Structured critique of a user flow."""

    overall_score: float = Field(ge=1, le=10)
    general_analysis: str
    positive_points: list[str]
    recommendations: list[Recommendation]
    benchmarks: list[Benchmark]
    accessibility_report: list[AccessibilityIssue]
