import uuid
from datetime import date

from sqlalchemy import BigInteger, Date, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_portal.db.base import Base, TimestampMixin, UUIDMixin
from travel_portal.models.request_base import ApprovalStepMixin, RequestMixin


class VisaApplication(Base, RequestMixin):
    __tablename__ = "visa_applications"

    trf_id: Mapped[str | None] = mapped_column(
        String(40), ForeignKey("travel_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    destination: Mapped[str] = mapped_column(String(100), nullable=False)
    visa_type: Mapped[str] = mapped_column(String(50), nullable=False)
    travel_purpose: Mapped[str] = mapped_column(Text, nullable=False)
    passport_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    passport_expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    trip_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    trip_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    documents: Mapped[list["VisaDocument"]] = relationship(
        "VisaDocument", back_populates="application", cascade="all, delete-orphan", passive_deletes=True
    )
    steps: Mapped[list["VisaApprovalStep"]] = relationship(
        "VisaApprovalStep",
        back_populates="request",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="VisaApprovalStep.created_at",
    )


class VisaDocument(Base, UUIDMixin, TimestampMixin):
    """Metadata for a file stored under UPLOAD_DIR/visa-documents."""

    __tablename__ = "visa_documents"

    visa_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("visa_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_type: Mapped[str] = mapped_column(String(50), nullable=False, default="passport_copy")
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)  # original client filename
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    application: Mapped[VisaApplication] = relationship(VisaApplication, back_populates="documents")


class VisaApprovalStep(Base, ApprovalStepMixin):
    __tablename__ = "visa_approval_steps"

    request_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("visa_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )

    request: Mapped[VisaApplication] = relationship(VisaApplication, back_populates="steps")
