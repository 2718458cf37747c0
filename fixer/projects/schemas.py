from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    project_name: str = Field(min_length=1, max_length=255)
    signing_key: str | None = Field(None, max_length=255)
    event_key: str | None = Field(None, max_length=255)


class ProjectResponse(BaseModel):
    id: UUID
    user_id: str
    project_name: str
    has_signing_key: bool
    created_at: datetime

    @classmethod
    def from_project(cls, project) -> "ProjectResponse":
        # Secrets never leave the service
        return cls(
            id=project.id,
            user_id=project.user_id,
            project_name=project.project_name,
            has_signing_key=bool(project.signing_key),
            created_at=project.created_at,
        )


class ProjectListResponse(BaseModel):
    items: list[ProjectResponse]
    total: int
