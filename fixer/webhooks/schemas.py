from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel


class FailureNotification(BaseModel):
    """Canonical failure notification, whatever wire shape it arrived in."""

    function_id: str
    run_id: str
    event: dict[str, Any]
    error: dict[str, Any]

    @property
    def event_id(self) -> str | None:
        value = self.event.get("id")
        return str(value) if value else None

    @property
    def event_name(self) -> str:
        return str(self.event.get("name") or "unknown")

    @property
    def event_data(self) -> Any:
        return self.event.get("data")

    @property
    def error_message(self) -> str:
        return str(self.error.get("message") or "")

    @property
    def error_name(self) -> str:
        return str(self.error.get("name") or "Error")

    @property
    def error_stack(self) -> str | None:
        stack = self.error.get("stack")
        return str(stack) if stack else None


ItemStatus = Literal["processed", "skipped", "error"]


class ItemResult(BaseModel):
    index: int
    status: ItemStatus
    reason: str | None = None
    failure_id: UUID | None = None
    project_id: UUID | None = None
    has_fix: bool = False
    confidence: str | None = None


class WebhookResponse(BaseModel):
    success: bool
    message: str
    processed: int
    skipped: int
    errors: int
    results: list[ItemResult]
