from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixer.projects.models import Project
from fixer.projects.schemas import ProjectCreate

logger = structlog.get_logger()

# Query value meaning "no tenant pinned", kept for webhook URLs generated by older dashboards
ALL_PROJECTS = "all"


async def get_project_by_id(db: AsyncSession, project_id: UUID) -> Project | None:
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def get_latest_project(db: AsyncSession) -> Project | None:
    result = await db.execute(
        select(Project).order_by(Project.created_at.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_project(db: AsyncSession, project_id: str | None) -> Project | None:
    """Map an optional tenant identifier to exactly one project.

    An explicit id is looked up directly. A missing id (or the ``all``
    sentinel) falls back to the most recently created project across the
    whole store, which covers first-time setups that registered the webhook
    URL without a ``project_id``. Returns None when nothing matches; an id
    that is not a valid UUID is a miss, not an error.
    """
    if project_id and project_id != ALL_PROJECTS:
        try:
            pid = UUID(project_id)
        except ValueError:
            logger.warning("project_id_malformed", project_id=project_id)
            return None
        return await get_project_by_id(db, pid)

    return await get_latest_project(db)


async def get_projects_for_user(db: AsyncSession, user_id: str) -> list[Project]:
    result = await db.execute(
        select(Project)
        .where(Project.user_id == user_id)
        .order_by(Project.created_at.desc())
    )
    return list(result.scalars().all())


async def create_project(db: AsyncSession, user_id: str, data: ProjectCreate) -> Project:
    project = Project(
        user_id=user_id,
        project_name=data.project_name,
        signing_key=data.signing_key or None,
        event_key=data.event_key or None,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)

    logger.info("project_created", project_id=str(project.id), user_id=user_id)
    return project
