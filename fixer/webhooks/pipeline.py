"""Per-item ingestion pipeline for failure webhook batches.

Items run one at a time in array order. Each produces exactly one
``ItemResult``; nothing that goes wrong with one item stops its siblings.
"""

from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fixer.diagnosis.service import Diagnoser
from fixer.failures.models import STATUS_FAILED
from fixer.failures.service import insert_pending, update_result
from fixer.projects.service import resolve_project
from fixer.webhooks.normalizer import InvalidNotification, normalize, validate
from fixer.webhooks.schemas import ItemResult
from fixer.webhooks.signature import verify_signature

logger = structlog.get_logger()


async def process_item(
    db: AsyncSession,
    diagnoser: Diagnoser,
    index: int,
    payload: Any,
    raw_body: str,
    signature_header: str | None,
    project_id: str | None,
) -> ItemResult:
    normalized = normalize(payload)
    if normalized is None:
        logger.debug("item_not_failure_event", index=index)
        return ItemResult(index=index, status="skipped", reason="not a failure event")

    try:
        notification = validate(normalized)
    except InvalidNotification as exc:
        logger.warning("item_invalid", index=index, missing=exc.missing)
        return ItemResult(index=index, status="skipped", reason=str(exc))

    project = await resolve_project(db, project_id)
    if project is None:
        logger.warning("item_no_project", index=index, project_id=project_id)
        return ItemResult(index=index, status="skipped", reason="no project available")

    if not verify_signature(project.signing_key, raw_body, signature_header):
        logger.warning("item_signature_invalid", index=index, project_id=str(project.id))
        return ItemResult(
            index=index, status="skipped", reason="invalid signature", project_id=project.id,
        )

    try:
        record = await insert_pending(db, project, notification)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("item_insert_failed", index=index, project_id=str(project.id), error=str(exc))
        return ItemResult(
            index=index, status="error", reason=f"persistence error: {exc}", project_id=project.id,
        )

    outcome = await diagnoser.diagnose(notification)
    if outcome.ok:
        diagnosis = outcome.diagnosis
        values = {
            "fixed_payload": diagnosis.fixed_payload,
            "ai_analysis": diagnosis.ai_analysis,
            "fix_confidence": diagnosis.confidence,
            "status": diagnosis.status,
        }
    else:
        values = {
            "fixed_payload": None,
            "ai_analysis": f"AI Analysis failed: {outcome.error}",
            "fix_confidence": None,
            "status": STATUS_FAILED,
        }

    try:
        await update_result(db, record.id, **values)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("item_update_failed", index=index, failure_id=str(record.id), error=str(exc))
        return ItemResult(
            index=index,
            status="error",
            reason=f"persistence error: {exc}",
            failure_id=record.id,
            project_id=project.id,
        )

    return ItemResult(
        index=index,
        status="processed",
        failure_id=record.id,
        project_id=project.id,
        has_fix=values["fixed_payload"] is not None,
        confidence=values["fix_confidence"],
    )


async def process_batch(
    db: AsyncSession,
    diagnoser: Diagnoser,
    items: list[Any],
    raw_body: str,
    signature_header: str | None = None,
    project_id: str | None = None,
) -> list[ItemResult]:
    results: list[ItemResult] = []
    for index, payload in enumerate(items):
        try:
            result = await process_item(
                db, diagnoser, index, payload, raw_body, signature_header, project_id,
            )
        except Exception as exc:
            await db.rollback()
            logger.error("item_unexpected_error", index=index, error_type=type(exc).__name__, error=str(exc))
            result = ItemResult(index=index, status="error", reason=f"unexpected error: {exc}")
        results.append(result)

    logger.info(
        "batch_processed",
        items=len(items),
        processed=sum(1 for r in results if r.status == "processed"),
        skipped=sum(1 for r in results if r.status == "skipped"),
        errors=sum(1 for r in results if r.status == "error"),
    )
    return results
