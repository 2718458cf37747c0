import json

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fixer.database import get_db
from fixer.dependencies import get_reasoner
from fixer.diagnosis.llm import ReasoningClient
from fixer.diagnosis.service import Diagnoser
from fixer.webhooks.pipeline import process_batch
from fixer.webhooks.schemas import WebhookResponse
from fixer.webhooks.signature import SIGNATURE_HEADER

logger = structlog.get_logger()
router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/inngest", response_model=WebhookResponse)
async def inngest_failure_webhook(
    request: Request,
    project_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    reasoner: ReasoningClient = Depends(get_reasoner),
):
    """Receive one failure notification or a batch of them.

    Unauthenticated at the HTTP level; each item is checked against the
    resolved project's signing key when one is configured. Item-level
    failures are reported in ``results`` and never change the status code.
    """
    # Signatures cover the exact bytes sent, so keep the raw text around
    try:
        raw_body = (await request.body()).decode("utf-8")
        payload = json.loads(raw_body)
    except (ValueError, RecursionError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON")

    if isinstance(payload, dict):
        items = [payload]
    elif isinstance(payload, list):
        items = payload
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Expected a notification object or an array of notifications",
        )

    logger.info("webhook_received", project_id=project_id or "all", items=len(items))

    results = await process_batch(
        db,
        Diagnoser(reasoner),
        items,
        raw_body,
        signature_header=request.headers.get(SIGNATURE_HEADER),
        project_id=project_id,
    )

    processed = sum(1 for r in results if r.status == "processed")
    skipped = sum(1 for r in results if r.status == "skipped")
    errors = sum(1 for r in results if r.status == "error")

    return WebhookResponse(
        success=True,
        message=f"Processed {processed} of {len(items)} notification(s)",
        processed=processed,
        skipped=skipped,
        errors=errors,
        results=results,
    )
