import uuid

from sqlalchemy import JSON, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fixer.models.base import Base, TimestampMixin, generate_uuid

STATUS_PENDING = "pending"
STATUS_FIXED = "fixed"
STATUS_FAILED = "failed"
# Reserved for replay-with-fix; nothing in the ingestion pipeline sets it
STATUS_REPLAYED = "replayed"

FAILURE_STATUSES = (STATUS_PENDING, STATUS_FIXED, STATUS_FAILED, STATUS_REPLAYED)
CONFIDENCE_LEVELS = ("low", "medium", "high")


class FailureRecord(TimestampMixin, Base):
    __tablename__ = "failure_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # Soft dedup key only; duplicate webhook deliveries produce duplicate rows
    event_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    function_id: Mapped[str] = mapped_column(String(255), nullable=False)
    run_id: Mapped[str] = mapped_column(String(255), nullable=False)
    error_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    original_payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    fixed_payload: Mapped[dict | list | None] = mapped_column(JSON(none_as_null=True))
    ai_analysis: Mapped[str | None] = mapped_column(Text)
    fix_confidence: Mapped[str | None] = mapped_column(String(10))  # low, medium, high
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_PENDING, index=True)
