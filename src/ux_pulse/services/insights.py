"""Derived views over an analysis report."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from ux_pulse.domain.reports import AccessibilityIssue, AnalysisReport, Recommendation


@dataclass(frozen=True)
class PrioritizationMatrix:
    """Recommendations bucketed by impact and effort, as original indices."""

    quick_wins: list[int] = field(default_factory=list)
    major_projects: list[int] = field(default_factory=list)
    fill_ins: list[int] = field(default_factory=list)
    time_sinks: list[int] = field(default_factory=list)


def prioritize(recommendations: Sequence[Recommendation]) -> PrioritizationMatrix:
    """Place each recommendation in an impact/effort quadrant."""
    matrix = PrioritizationMatrix()
    for index, recommendation in enumerate(recommendations):
        high_impact = recommendation.impact != "Low"
        high_effort = recommendation.effort == "High"
        if high_impact and not high_effort:
            matrix.quick_wins.append(index)
        elif high_impact:
            matrix.major_projects.append(index)
        elif not high_effort:
            matrix.fill_ins.append(index)
        else:
            matrix.time_sinks.append(index)
    return matrix


def out_of_range_entries(
    report: AnalysisReport, screen_count: int
) -> list[Recommendation | AccessibilityIssue]:
    """Return report entries that point past the last screen."""
    entries: list[Recommendation | AccessibilityIssue] = [
        *report.recommendations,
        *report.accessibility_report,
    ]
    return [entry for entry in entries if not 0 <= entry.screen_index < screen_count]
