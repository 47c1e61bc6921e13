"""Columns shared by every request table and every approval-step table."""
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from travel_portal.db.base import TimestampMixin, UUIDMixin


class RequestMixin(TimestampMixin):
    """Requestor identity, workflow status and processing payload."""

    id: Mapped[str] = mapped_column(String(40), primary_key=True)  # TSR-20250702-1423-NYC-PCYX
    requestor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    requestor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    staff_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processing_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # booking / reimbursement / visa issue data
    processing_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processing_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ApprovalStepMixin(UUIDMixin, TimestampMixin):
    """One append-only row per transition; created_at is the step date."""

    role: Mapped[str] = mapped_column(String(100), nullable=False)
    actor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(60), nullable=False)  # Submitted, Approved, Rejected, Cancelled, Processing, Completed
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
