"""Prompt templates for UX flow analysis."""

from ux_pulse.domain.assets import SourceKind
from ux_pulse.domain.reports import AnalysisReport
from ux_pulse.domain.workflows import Persona

PRESET_OBJECTIVES: tuple[str, ...] = (
    "Increase onboarding completion rate",
    "Reduce drop-off in the checkout process",
    "Improve usability for first-time users",
    "Enhance clarity and information hierarchy",
)

PERSONA_INSTRUCTIONS: dict[Persona, str] = {
    Persona.STANDARD: (
        "Act as a world-class product designer and accessibility expert. "
        "Balance usability, visual hierarchy and business goals."
    ),
    Persona.CONVERSION: (
        "Act as a growth-focused product designer. Prioritize friction that "
        "costs conversions: unclear calls to action, extra steps, weak trust "
        "signals and confusing pricing."
    ),
    Persona.ACCESSIBILITY: (
        "Act as a senior accessibility specialist. Weigh every finding by its "
        "impact on users with visual, motor or cognitive impairments."
    ),
    Persona.NOVICE: (
        "Act as an advocate for first-time users with no prior knowledge of "
        "the product. Call out jargon, hidden affordances and missing guidance."
    ),
}

_SOURCE_DESCRIPTIONS: dict[SourceKind, str] = {
    SourceKind.VIDEO: (
        "The flow is presented in sequential frames extracted from a video "
        "recording of a user session."
    ),
    SourceKind.IMAGES: "The flow is presented in a series of static screenshots.",
}


def build_initial_prompt(
    objective: str, source_kind: SourceKind, persona: Persona
) -> str:
    """Build the prompt for a first analysis of a flow."""
    return (
        f'My main goal is to: "{objective}". Based on this goal, please provide '
        "a comprehensive UX/UI analysis of the user flow. "
        f"{_SOURCE_DESCRIPTIONS[source_kind]} The flow proceeds in the order the "
        "images are provided; screenIndex values are 0-based positions in that "
        "order.\n\n"
        f"{PERSONA_INSTRUCTIONS[persona]} Structure the analysis according to "
        "the JSON schema provided, and keep recommendations concrete and "
        "actionable.\n\n"
        "In the accessibilityReport section, perform a thorough accessibility "
        "analysis of the screens based on WCAG 2.1 AA principles. Identify "
        "issues related to color contrast, alternative text for images, touch "
        "target sizes, form labeling, and semantic structure, each with a "
        "severity rating."
    )


def build_refinement_prompt(
    objective: str,
    persona: Persona,
    previous_report: AnalysisReport,
    feedback: str,
) -> str:
    """Build the prompt that asks for a full replacement report."""
    previous_json = previous_report.model_dump_json(by_alias=True)
    return (
        f"{PERSONA_INSTRUCTIONS[persona]} You previously provided the following "
        f'UX analysis (in JSON format):\n\n"""json\n{previous_json}\n"""\n\n'
        f'The user\'s original goal was: "{objective}".\n\n'
        "Now, the user has provided the following feedback on your analysis:\n\n"
        f'"{feedback}"\n\n'
        "Please provide a new, refined analysis based on this feedback. Update "
        "your previous recommendations, scores, accessibility findings, and "
        "insights as necessary. Maintain the same JSON schema. Your new "
        "analysis must be a complete replacement for the old one, not a list "
        "of changes."
    )
