"""Pydantic models for API request bodies."""

from pydantic import Base64Bytes, BaseModel, Field

from ux_pulse.domain.assets import SourceAsset, SourceKind
from ux_pulse.domain.workflows import Persona


class AssetPayload(BaseModel):
    """Uploaded file with base64-encoded content."""

    name: str
    mime_type: str
    data: Base64Bytes

    def to_asset(self) -> SourceAsset:
        return SourceAsset(name=self.name, mime_type=self.mime_type, data=self.data)


class SelectFilesRequest(BaseModel):
    """Screens or a single video for the upload step."""

    source_kind: SourceKind = SourceKind.IMAGES
    files: list[AssetPayload] = Field(min_length=1)


class ObjectiveRequest(BaseModel):
    """Objective and persona for the initial analysis."""

    objective: str
    persona: Persona = Persona.STANDARD


class RefineRequest(BaseModel):
    """Feedback on an existing report."""

    feedback: str


class CreateProjectRequest(BaseModel):
    """New project fields."""

    name: str
    description: str = ""


class CreateWorkflowRequest(BaseModel):
    """New workflow fields."""

    name: str | None = None
