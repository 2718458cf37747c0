"""Shared test doubles and payload builders."""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from fixer.diagnosis.llm import ReasoningClient
from fixer.projects.models import Project

FIXED_REPLY = """ANALYSIS: The event is missing the email field.
ROOT_CAUSE: The producer never set data.email when creating the user.
CONFIDENCE: HIGH
FIXED_PAYLOAD:
```json
{
  "name": "test/user.created",
  "data": {"email": "john@example.com", "user": {"id": "u_1", "name": "John Doe"}}
}
```
"""

NO_PAYLOAD_REPLY = """ANALYSIS: Not enough information to reconstruct the payload.
ROOT_CAUSE: The error message does not name the field.
CONFIDENCE: low
"""


class FakeReasoner(ReasoningClient):
    """Returns a canned reply, or raises ``error`` when set."""

    def __init__(self, reply: str = FIXED_REPLY, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def make_event(event_id: str | None = "evt_001") -> dict:
    event = {
        "name": "test/user.created",
        "data": {"user": {"name": "John Doe"}},
        "ts": 1760000000000,
    }
    if event_id:
        event["id"] = event_id
    return event


def make_error() -> dict:
    return {
        "name": "Error",
        "message": "Missing required field: email",
        "stack": "Error: Missing required field: email\n    at testFailingFunction",
    }


def make_notification(
    name: str = "inngest/function.failed",
    function_id: str = "test-failing-function",
    run_id: str = "run_abc123",
    event_id: str | None = "evt_001",
) -> dict:
    return {
        "name": name,
        "data": {
            "function_id": function_id,
            "run_id": run_id,
            "event": make_event(event_id),
            "error": make_error(),
        },
    }


async def add_project(
    session: AsyncSession,
    user_id: str = "user_1",
    project_name: str = "Test Project",
    signing_key: str | None = None,
    created_at: datetime | None = None,
) -> Project:
    project = Project(
        user_id=user_id,
        project_name=project_name,
        signing_key=signing_key,
        created_at=created_at or datetime.now(timezone.utc),
    )
    session.add(project)
    await session.commit()
    await session.refresh(project)
    return project
