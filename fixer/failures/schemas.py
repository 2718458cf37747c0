from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class FailureResponse(BaseModel):
    id: UUID
    project_id: UUID
    user_id: str
    event_id: str
    function_id: str
    run_id: str
    error_message: str
    original_payload: dict[str, Any]
    fixed_payload: Any | None
    ai_analysis: str | None
    fix_confidence: str | None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FailureSummary(BaseModel):
    id: UUID
    project_id: UUID
    function_id: str
    run_id: str
    error_message: str
    fix_confidence: str | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class FailureListResponse(BaseModel):
    items: list[FailureSummary]
    total: int
