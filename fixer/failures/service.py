import secrets
import uuid

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fixer.failures.models import STATUS_FAILED, STATUS_FIXED, STATUS_PENDING, FailureRecord
from fixer.projects.models import Project
from fixer.webhooks.schemas import FailureNotification

logger = structlog.get_logger()

TERMINAL_STATUSES = (STATUS_FIXED, STATUS_FAILED)


def fallback_event_id() -> str:
    return f"gen_{secrets.token_hex(4)}"


async def insert_pending(
    db: AsyncSession, project: Project, notification: FailureNotification,
) -> FailureRecord:
    """Persist a pending record before any diagnosis runs.

    Committed immediately so a crash mid-diagnosis still leaves an auditable
    row behind.
    """
    record = FailureRecord(
        project_id=project.id,
        user_id=project.user_id,
        event_id=notification.event_id or fallback_event_id(),
        function_id=notification.function_id,
        run_id=notification.run_id,
        error_message=notification.error_message,
        original_payload=notification.event,
        status=STATUS_PENDING,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)

    logger.info(
        "failure_saved_pending",
        failure_id=str(record.id),
        project_id=str(project.id),
        function_id=record.function_id,
        run_id=record.run_id,
    )
    return record


async def update_result(
    db: AsyncSession,
    record_id: uuid.UUID,
    *,
    fixed_payload,
    ai_analysis: str | None,
    fix_confidence: str | None,
    status: str,
) -> bool:
    """Move a pending record to its terminal status.

    Only rows still in ``pending`` are touched, so a record transitions at
    most once. Returns False when no pending row matched.
    """
    if status not in TERMINAL_STATUSES:
        raise ValueError(f"Not a terminal status: {status}")

    result = await db.execute(
        update(FailureRecord)
        .where(FailureRecord.id == record_id, FailureRecord.status == STATUS_PENDING)
        .values(
            fixed_payload=fixed_payload,
            ai_analysis=ai_analysis,
            fix_confidence=fix_confidence,
            status=status,
        )
    )
    await db.commit()

    if result.rowcount == 0:
        logger.warning("failure_update_no_pending_row", failure_id=str(record_id), status=status)
        return False

    logger.info("failure_updated", failure_id=str(record_id), status=status, confidence=fix_confidence)
    return True


async def get_failure_for_user(
    db: AsyncSession, failure_id: uuid.UUID, user_id: str,
) -> FailureRecord | None:
    result = await db.execute(
        select(FailureRecord).where(
            FailureRecord.id == failure_id,
            FailureRecord.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def get_failures(
    db: AsyncSession,
    user_id: str,
    status: str | None = None,
    project_id: uuid.UUID | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[FailureRecord], int]:
    query = select(FailureRecord).where(FailureRecord.user_id == user_id)
    count_query = select(func.count()).select_from(FailureRecord).where(FailureRecord.user_id == user_id)

    if status:
        query = query.where(FailureRecord.status == status)
        count_query = count_query.where(FailureRecord.status == status)
    if project_id:
        query = query.where(FailureRecord.project_id == project_id)
        count_query = count_query.where(FailureRecord.project_id == project_id)

    query = query.order_by(FailureRecord.created_at.desc())
    query = query.offset((page - 1) * per_page).limit(per_page)

    result = await db.execute(query)
    count_result = await db.execute(count_query)

    return list(result.scalars().all()), count_result.scalar_one()
