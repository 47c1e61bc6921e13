from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_portal.db.base import Base
from travel_portal.models.request_base import ApprovalStepMixin, RequestMixin


class TransportRequest(Base, RequestMixin):
    __tablename__ = "transport_requests"

    tsr_reference: Mapped[str | None] = mapped_column(
        String(40), ForeignKey("travel_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cost_center: Mapped[str | None] = mapped_column(String(50), nullable=True)
    tel_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # [{date, from_location, to_location, departure_time, transport_type, number_of_passengers}]
    transport_details: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    additional_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    steps: Mapped[list["TransportApprovalStep"]] = relationship(
        "TransportApprovalStep",
        back_populates="request",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TransportApprovalStep.created_at",
    )


class TransportApprovalStep(Base, ApprovalStepMixin):
    __tablename__ = "transport_approval_steps"

    request_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("transport_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )

    request: Mapped[TransportRequest] = relationship(TransportRequest, back_populates="steps")
