"""Project and workflow endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, HTTPException, Request, status

from ux_pulse.api.models import (
    CreateProjectRequest,
    CreateWorkflowRequest,
    ObjectiveRequest,
    RefineRequest,
    SelectFilesRequest,
)
from ux_pulse.domain.assets import SourceKind
from ux_pulse.services.insights import out_of_range_entries, prioritize

if TYPE_CHECKING:
    from ux_pulse.containers import AppContainer
    from ux_pulse.domain.workflows import ProjectRecord, WorkflowRecord

router = APIRouter(tags=["workflows"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/projects")
async def list_projects(request: Request) -> dict[str, object]:
    """Return all projects with workflow summaries."""
    workspace = _container(request).workspace_service
    return {
        "projects": [_project_view(project) for project in workspace.list_projects()],
        "active_project_id": workspace.active_project_id,
        "active_workflow_id": workspace.active_workflow_id,
    }


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: CreateProjectRequest, request: Request
) -> dict[str, object]:
    project = _container(request).workspace_service.create_project(
        body.name, body.description
    )
    return _project_view(project)


@router.post("/projects/{project_id}/select")
async def select_project(project_id: UUID, request: Request) -> dict[str, object]:
    project = _container(request).workspace_service.select_project(project_id)
    return _project_view(project)


@router.post("/projects/{project_id}/workflows", status_code=status.HTTP_201_CREATED)
async def create_workflow(
    project_id: UUID, body: CreateWorkflowRequest, request: Request
) -> dict[str, object]:
    workflow = _container(request).workspace_service.create_workflow(
        project_id, body.name
    )
    return _workflow_view(workflow)


@router.get("/workflows/{workflow_id}")
async def get_workflow(workflow_id: UUID, request: Request) -> dict[str, object]:
    """Return the full read model of a workflow."""
    workflow = _container(request).session_service.get_workflow(workflow_id)
    return _workflow_view(workflow)


@router.post("/workflows/{workflow_id}/select")
async def select_workflow(workflow_id: UUID, request: Request) -> dict[str, object]:
    workflow = _container(request).workspace_service.select_workflow(workflow_id)
    return _workflow_view(workflow)


@router.post("/workflows/{workflow_id}/files")
async def select_files(
    workflow_id: UUID, body: SelectFilesRequest, request: Request
) -> dict[str, object]:
    """Store screenshots, or extract frames from a single video."""
    sessions = _container(request).session_service
    if body.source_kind == SourceKind.VIDEO:
        if len(body.files) != 1:
            raise HTTPException(
                status_code=422,
                detail="Upload exactly one video",
            )
        workflow = await sessions.select_video(workflow_id, body.files[0].to_asset())
    else:
        workflow = sessions.select_files(
            workflow_id, [item.to_asset() for item in body.files], body.source_kind
        )
    return _workflow_view(workflow)


@router.delete("/workflows/{workflow_id}/screens/{index}")
async def remove_screen(
    workflow_id: UUID, index: int, request: Request
) -> dict[str, object]:
    workflow = _container(request).session_service.remove_screen(workflow_id, index)
    return _workflow_view(workflow)


@router.post("/workflows/{workflow_id}/objective")
async def submit_objective(
    workflow_id: UUID, body: ObjectiveRequest, request: Request
) -> dict[str, object]:
    """Run the initial analysis; failures come back in the error field."""
    workflow = await _container(request).session_service.submit_objective(
        workflow_id, body.objective, body.persona
    )
    return _workflow_view(workflow)


@router.post("/workflows/{workflow_id}/refine")
async def refine(
    workflow_id: UUID, body: RefineRequest, request: Request
) -> dict[str, object]:
    workflow = await _container(request).session_service.refine(
        workflow_id, body.feedback
    )
    return _workflow_view(workflow)


@router.post("/workflows/{workflow_id}/back")
async def back(workflow_id: UUID, request: Request) -> dict[str, object]:
    workflow = _container(request).session_service.back(workflow_id)
    return _workflow_view(workflow)


@router.post("/workflows/{workflow_id}/start-over")
async def start_over(workflow_id: UUID, request: Request) -> dict[str, object]:
    workflow = _container(request).session_service.start_over(workflow_id)
    return _workflow_view(workflow)


def _project_view(project: ProjectRecord) -> dict[str, object]:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "created_at": project.created_at,
        "workflows": [
            {
                "id": workflow.id,
                "name": workflow.name,
                "status": workflow.status,
                "updated_at": workflow.updated_at,
            }
            for workflow in project.workflows
        ],
    }


def _workflow_view(workflow: WorkflowRecord) -> dict[str, object]:
    report = workflow.report
    view: dict[str, object] = {
        "id": workflow.id,
        "project_id": workflow.project_id,
        "name": workflow.name,
        "status": workflow.status,
        "step": workflow.step,
        "source_kind": workflow.source_kind,
        "objective": workflow.objective,
        "persona": workflow.persona,
        "error": workflow.error,
        "created_at": workflow.created_at,
        "updated_at": workflow.updated_at,
        "screens": [
            {"index": index, "name": screen.name, "mime_type": screen.mime_type}
            for index, screen in enumerate(workflow.screens)
        ],
        "report": None,
        "prioritization": None,
        "warnings": [],
    }
    if report is not None:
        view["report"] = report.model_dump(by_alias=True)
        view["prioritization"] = asdict(prioritize(report.recommendations))
        view["warnings"] = [
            f"'{entry.title}' references missing screen {entry.screen_index}"
            for entry in out_of_range_entries(report, len(workflow.screens))
        ]
    return view
