"""Project/workflow hierarchy with a single active workflow."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from ux_pulse.domain.errors import InvalidTransition, ProjectNotFound, WorkflowNotFound
from ux_pulse.domain.workflows import ProjectRecord, Step, WorkflowRecord
from ux_pulse.services.sessions import WorkflowRepository, require_idle

_EDITABLE_FIELDS = frozenset({"name", "objective", "persona"})
_DRAFT_FIELDS = frozenset({"objective", "persona"})
_DRAFT_STEPS = frozenset({Step.UPLOAD, Step.OBJECTIVE})

_logger = logging.getLogger(__name__)


class WorkspaceRepository(WorkflowRepository, Protocol):
    """Persistence interface for projects and their workflows."""

    def list_projects(self) -> list[ProjectRecord]:
        """Return all projects in creation order."""

    def get_project(self, project_id: UUID) -> ProjectRecord | None:
        """Return a project with its workflows, if present."""

    def create_project(self, name: str, description: str) -> ProjectRecord:
        """Create a project and return it."""

    def create_workflow(self, project_id: UUID, name: str) -> WorkflowRecord:
        """Append a draft workflow to a project and return it."""


@dataclass
class WorkspaceService:
    """Tracks the active project and workflow over a workspace repository."""

    repository: WorkspaceRepository
    active_project_id: UUID | None = None
    active_workflow_id: UUID | None = None

    def list_projects(self) -> list[ProjectRecord]:
        return self.repository.list_projects()

    def create_project(self, name: str, description: str = "") -> ProjectRecord:
        """Create a project and make it active."""
        if not name.strip():
            raise InvalidTransition("Project name must not be empty")
        project = self.repository.create_project(name.strip(), description.strip())
        self.active_project_id = project.id
        self.active_workflow_id = None
        _logger.info("Project created: id=%s", project.id)
        return project

    def create_workflow(self, project_id: UUID, name: str | None = None) -> WorkflowRecord:
        """Add a draft workflow to a project and make both active."""
        project = self._get_project(project_id)
        workflow_name = name.strip() if name and name.strip() else None
        workflow = self.repository.create_workflow(
            project.id, workflow_name or f"Flow {len(project.workflows) + 1}"
        )
        self.active_project_id = project.id
        self.active_workflow_id = workflow.id
        _logger.info("Workflow created: id=%s project=%s", workflow.id, project.id)
        return workflow

    def select_project(self, project_id: UUID) -> ProjectRecord:
        project = self._get_project(project_id)
        self.active_project_id = project.id
        self.active_workflow_id = None
        return project

    def select_workflow(self, workflow_id: UUID) -> WorkflowRecord:
        workflow = self.repository.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFound(f"Workflow {workflow_id} not found")
        self.active_project_id = workflow.project_id
        self.active_workflow_id = workflow.id
        return workflow

    def clear_selection(self) -> None:
        self.active_project_id = None
        self.active_workflow_id = None

    def active_project(self) -> ProjectRecord | None:
        if self.active_project_id is None:
            return None
        return self.repository.get_project(self.active_project_id)

    def active_workflow(self) -> WorkflowRecord | None:
        if self.active_workflow_id is None:
            return None
        return self.repository.get_workflow(self.active_workflow_id)

    def update_active_workflow(self, **changes: object) -> WorkflowRecord:
        """Merge editable fields into the active workflow and stamp updated_at.

        Screens, step, status, report and error belong to the session state
        machine and cannot be set here. Objective and persona are frozen once
        an analysis has started.
        """
        current = self.active_workflow()
        if current is None:
            raise WorkflowNotFound("No active workflow")
        require_idle(current)
        owned = sorted(changes.keys() - _EDITABLE_FIELDS)
        if owned:
            raise InvalidTransition(f"Cannot update {', '.join(owned)} directly")
        if changes.keys() & _DRAFT_FIELDS and current.step not in _DRAFT_STEPS:
            raise InvalidTransition(
                f"Cannot change the objective on the {current.step} step"
            )
        updated = replace(current, **changes, updated_at=datetime.now(tz=UTC))
        self.repository.update_workflow(updated)
        return updated

    def _get_project(self, project_id: UUID) -> ProjectRecord:
        project = self.repository.get_project(project_id)
        if project is None:
            raise ProjectNotFound(f"Project {project_id} not found")
        return project
