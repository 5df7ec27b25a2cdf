"""Domain models for projects and analysis workflows."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from ux_pulse.domain.assets import SourceAsset, SourceKind
from ux_pulse.domain.reports import AnalysisReport


class Step(StrEnum):
    """Screen of the analysis flow the user is on."""

    UPLOAD = "upload"
    OBJECTIVE = "objective"
    ANALYZING = "analyzing"
    REPORT = "report"


class WorkflowStatus(StrEnum):
    """Lifecycle status of a workflow."""

    DRAFT = "draft"
    ANALYZING = "analyzing"
    COMPLETED = "completed"


class Persona(StrEnum):
    """Reviewer stance used when prompting the model."""

    STANDARD = "standard"
    CONVERSION = "conversion"
    ACCESSIBILITY = "accessibility"
    NOVICE = "novice"


@dataclass(frozen=True)
class WorkflowRecord:
    """One end-to-end analysis attempt."""

    id: UUID
    project_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    status: WorkflowStatus = WorkflowStatus.DRAFT
    step: Step = Step.UPLOAD
    screens: tuple[SourceAsset, ...] = ()
    source_kind: SourceKind = SourceKind.IMAGES
    objective: str = ""
    persona: Persona = Persona.STANDARD
    report: AnalysisReport | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProjectRecord:
    """A named group of workflows."""

    id: UUID
    name: str
    description: str
    created_at: datetime
    workflows: tuple[WorkflowRecord, ...] = field(default=())
