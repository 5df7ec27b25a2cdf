"""In-memory project and workflow store."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from ux_pulse.domain.errors import ProjectNotFound, WorkflowNotFound
from ux_pulse.domain.workflows import ProjectRecord, WorkflowRecord
from ux_pulse.services.workspace import WorkspaceRepository


@dataclass
class InMemoryWorkspaceRepository(WorkspaceRepository):
    """Indexed store of frozen records keyed by id.

    Projects are stored without their workflows; ``workflow_ids`` keeps the
    per-project order and ``get_project`` assembles the full record.
    """

    projects: dict[UUID, ProjectRecord] = field(default_factory=dict)
    workflows: dict[UUID, WorkflowRecord] = field(default_factory=dict)
    workflow_ids: dict[UUID, list[UUID]] = field(default_factory=dict)

    def list_projects(self) -> list[ProjectRecord]:
        return [self._assemble(project) for project in self.projects.values()]

    def get_project(self, project_id: UUID) -> ProjectRecord | None:
        project = self.projects.get(project_id)
        if project is None:
            return None
        return self._assemble(project)

    def create_project(self, name: str, description: str) -> ProjectRecord:
        project = ProjectRecord(
            id=uuid4(),
            name=name,
            description=description,
            created_at=datetime.now(tz=UTC),
        )
        self.projects[project.id] = project
        self.workflow_ids[project.id] = []
        return project

    def create_workflow(self, project_id: UUID, name: str) -> WorkflowRecord:
        if project_id not in self.projects:
            raise ProjectNotFound(f"Project {project_id} not found")
        now = datetime.now(tz=UTC)
        workflow = WorkflowRecord(
            id=uuid4(),
            project_id=project_id,
            name=name,
            created_at=now,
            updated_at=now,
        )
        self.workflows[workflow.id] = workflow
        self.workflow_ids[project_id].append(workflow.id)
        return workflow

    def get_workflow(self, workflow_id: UUID) -> WorkflowRecord | None:
        return self.workflows.get(workflow_id)

    def update_workflow(self, workflow: WorkflowRecord) -> None:
        current = self.workflows.get(workflow.id)
        if current is None:
            raise WorkflowNotFound(f"Workflow {workflow.id} not found")
        if current.project_id != workflow.project_id:
            raise WorkflowNotFound(
                f"Workflow {workflow.id} does not belong to project {workflow.project_id}"
            )
        self.workflows[workflow.id] = workflow

    def _assemble(self, project: ProjectRecord) -> ProjectRecord:
        workflows = tuple(
            self.workflows[workflow_id] for workflow_id in self.workflow_ids[project.id]
        )
        return replace(project, workflows=workflows)
