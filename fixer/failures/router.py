import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fixer.database import get_db
from fixer.dependencies import get_current_user_id
from fixer.failures.schemas import FailureListResponse, FailureResponse, FailureSummary
from fixer.failures.service import get_failure_for_user, get_failures

router = APIRouter(prefix="/failures", tags=["failures"])


@router.get("", response_model=FailureListResponse)
async def list_failures(
    status_filter: str | None = Query(None, alias="status", pattern="^(pending|fixed|failed|replayed)$"),
    project_id: uuid.UUID | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    items, total = await get_failures(db, user_id, status_filter, project_id, page, per_page)
    return FailureListResponse(
        items=[FailureSummary.model_validate(f) for f in items],
        total=total,
    )


@router.get("/{failure_id}", response_model=FailureResponse)
async def get_failure(
    failure_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    failure = await get_failure_for_user(db, failure_id, user_id)
    if not failure:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Failure not found")
    return FailureResponse.model_validate(failure)
