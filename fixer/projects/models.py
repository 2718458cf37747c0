import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fixer.models.base import Base, TimestampMixin, generate_uuid


class Project(TimestampMixin, Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    signing_key: Mapped[str | None] = mapped_column(String(255))  # webhook HMAC secret
    event_key: Mapped[str | None] = mapped_column(String(255))  # only used for sending test events
