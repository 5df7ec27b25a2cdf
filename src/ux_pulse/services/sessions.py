"""Session state machine for a single analysis workflow."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from ux_pulse.domain.assets import SourceAsset, SourceKind
from ux_pulse.domain.errors import (
    AnalysisInProgress,
    InvalidTransition,
    MediaDecodeError,
    NoFramesExtracted,
    WorkflowNotFound,
)
from ux_pulse.domain.reports import AnalysisReport
from ux_pulse.domain.workflows import Persona, Step, WorkflowRecord, WorkflowStatus
from ux_pulse.services.analysis import AnalysisService, Refinement
from ux_pulse.services.frames import FrameExtractor
from ux_pulse.services.insights import out_of_range_entries

_UNKNOWN_ERROR = "An unknown error occurred during analysis."

_logger = logging.getLogger(__name__)


class WorkflowRepository(Protocol):
    """Persistence interface for workflows."""

    def get_workflow(self, workflow_id: UUID) -> WorkflowRecord | None:
        """Return a workflow by id, if present."""

    def update_workflow(self, workflow: WorkflowRecord) -> None:
        """Replace the stored workflow with the same id."""


@dataclass
class SessionService:
    """State machine driving upload -> objective -> analyzing -> report.

    Every guard lives here; callers may mirror them for responsiveness but
    the checks below are authoritative. A workflow whose status is
    ``analyzing`` accepts no mutating action until the inference call
    settles.
    """

    repository: WorkflowRepository
    analysis_service: AnalysisService
    frame_extractor: FrameExtractor

    def get_workflow(self, workflow_id: UUID) -> WorkflowRecord:
        """Return the current workflow state."""
        workflow = self.repository.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFound(f"Workflow {workflow_id} not found")
        return workflow

    def select_files(
        self,
        workflow_id: UUID,
        files: Sequence[SourceAsset],
        source_kind: SourceKind = SourceKind.IMAGES,
    ) -> WorkflowRecord:
        """Store the screens to analyze and move on to the objective step."""
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        _require_step(workflow, Step.UPLOAD, "select files")
        screens = [asset for asset in files if asset.is_image]
        if source_kind == SourceKind.IMAGES:
            screens.sort(key=lambda asset: asset.name.casefold())
        if not screens:
            raise InvalidTransition("Select at least one image to analyze")
        return self._save(
            workflow,
            screens=tuple(screens),
            source_kind=source_kind,
            step=Step.OBJECTIVE,
            error=None,
        )

    async def select_video(self, workflow_id: UUID, asset: SourceAsset) -> WorkflowRecord:
        """Extract frames from a video and use them as the screens.

        Extraction failures are stored on the workflow, which stays on the
        upload step.
        """
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        _require_step(workflow, Step.UPLOAD, "select a video")
        try:
            frames = await self.frame_extractor.extract_async(asset)
        except (MediaDecodeError, NoFramesExtracted) as exc:
            _logger.warning("Frame extraction failed: video=%s error=%s", asset.name, exc)
            return self._save(self.get_workflow(workflow_id), error=str(exc))
        return self.select_files(
            workflow_id, [frame.to_asset() for frame in frames], SourceKind.VIDEO
        )

    def remove_screen(self, workflow_id: UUID, index: int) -> WorkflowRecord:
        """Drop one screen; an emptied objective step falls back to upload."""
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        if workflow.step not in {Step.UPLOAD, Step.OBJECTIVE}:
            raise InvalidTransition(f"Cannot remove screens on the {workflow.step} step")
        if not 0 <= index < len(workflow.screens):
            raise InvalidTransition(f"Screen index {index} is out of range")
        screens = workflow.screens[:index] + workflow.screens[index + 1 :]
        step = workflow.step if screens else Step.UPLOAD
        return self._save(workflow, screens=screens, step=step)

    def back(self, workflow_id: UUID) -> WorkflowRecord:
        """Return from the objective step to the upload step."""
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        _require_step(workflow, Step.OBJECTIVE, "go back")
        return self._save(workflow, step=Step.UPLOAD)

    async def submit_objective(
        self,
        workflow_id: UUID,
        objective: str,
        persona: Persona = Persona.STANDARD,
    ) -> WorkflowRecord:
        """Run the initial analysis.

        Any failure is stored as the workflow error and the workflow rolls
        back to the objective step with its screens and objective intact.
        """
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        _require_step(workflow, Step.OBJECTIVE, "submit an objective")
        if not objective.strip():
            raise InvalidTransition("Objective must not be empty")
        if not workflow.screens:
            raise InvalidTransition("No screens to analyze")

        workflow = self._save(
            workflow,
            objective=objective,
            persona=persona,
            status=WorkflowStatus.ANALYZING,
            step=Step.ANALYZING,
            report=None,
            error=None,
        )
        try:
            report = await self.analysis_service.analyze(
                workflow.screens, objective, workflow.source_kind, persona
            )
        except asyncio.CancelledError:
            _logger.warning("Analysis cancelled: workflow=%s", workflow_id)
            self._save(
                self.get_workflow(workflow_id),
                status=WorkflowStatus.DRAFT,
                step=Step.OBJECTIVE,
            )
            raise
        except Exception as exc:
            _logger.exception("Analysis failed", extra={"workflow_id": workflow_id})
            return self._save(
                self.get_workflow(workflow_id),
                status=WorkflowStatus.DRAFT,
                step=Step.OBJECTIVE,
                error=str(exc) or _UNKNOWN_ERROR,
            )
        _warn_out_of_range(workflow_id, report, len(workflow.screens))
        return self._save(
            self.get_workflow(workflow_id),
            report=report,
            status=WorkflowStatus.COMPLETED,
            step=Step.REPORT,
        )

    async def refine(self, workflow_id: UUID, feedback: str) -> WorkflowRecord:
        """Replace the report using the previous one plus user feedback.

        Failures are re-raised; the previous report is left untouched.
        """
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        if workflow.step != Step.REPORT or workflow.report is None:
            raise InvalidTransition("There is no report to refine")
        if not feedback.strip():
            raise InvalidTransition("Feedback must not be empty")

        refinement = Refinement(previous_report=workflow.report, feedback=feedback)
        workflow = self._save(workflow, status=WorkflowStatus.ANALYZING, error=None)
        try:
            report = await self.analysis_service.analyze(
                workflow.screens,
                workflow.objective,
                workflow.source_kind,
                workflow.persona,
                refinement=refinement,
            )
        except asyncio.CancelledError:
            _logger.warning("Refinement cancelled: workflow=%s", workflow_id)
            self._save(self.get_workflow(workflow_id), status=WorkflowStatus.COMPLETED)
            raise
        except Exception:
            _logger.exception("Refinement failed", extra={"workflow_id": workflow_id})
            self._save(self.get_workflow(workflow_id), status=WorkflowStatus.COMPLETED)
            raise
        _warn_out_of_range(workflow_id, report, len(workflow.screens))
        return self._save(
            self.get_workflow(workflow_id),
            report=report,
            status=WorkflowStatus.COMPLETED,
        )

    def start_over(self, workflow_id: UUID) -> WorkflowRecord:
        """Clear inputs and results and return to the upload step."""
        workflow = self.get_workflow(workflow_id)
        require_idle(workflow)
        return self._save(
            workflow,
            status=WorkflowStatus.DRAFT,
            step=Step.UPLOAD,
            screens=(),
            source_kind=SourceKind.IMAGES,
            objective="",
            report=None,
            error=None,
        )

    def _save(self, workflow: WorkflowRecord, **changes: object) -> WorkflowRecord:
        updated = replace(workflow, **changes, updated_at=datetime.now(tz=UTC))
        self.repository.update_workflow(updated)
        return updated


def require_idle(workflow: WorkflowRecord) -> None:
    """Reject any mutation while an inference call is in flight."""
    if workflow.status == WorkflowStatus.ANALYZING:
        raise AnalysisInProgress(f"Workflow {workflow.id} is already being analyzed")


def _require_step(workflow: WorkflowRecord, step: Step, action: str) -> None:
    if workflow.step != step:
        raise InvalidTransition(f"Cannot {action} on the {workflow.step} step")


def _warn_out_of_range(
    workflow_id: UUID, report: AnalysisReport, screen_count: int
) -> None:
    entries = out_of_range_entries(report, screen_count)
    if entries:
        _logger.warning(
            "Report references missing screens: workflow=%s entries=%s screens=%s",
            workflow_id,
            len(entries),
            screen_count,
        )
