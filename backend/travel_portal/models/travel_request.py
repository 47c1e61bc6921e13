from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_portal.db.base import Base
from travel_portal.models.request_base import ApprovalStepMixin, RequestMixin

TRAVEL_TYPES = ("Domestic", "Overseas", "Home Leave Passage", "External Parties")


class TravelRequest(Base, RequestMixin):
    """Travel Service Request (TSR/TRF)."""

    __tablename__ = "travel_requests"

    travel_type: Mapped[str] = mapped_column(String(50), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cost_center: Mapped[str | None] = mapped_column(String(50), nullable=True)
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    itinerary: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    external_party_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    additional_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    steps: Mapped[list["TrfApprovalStep"]] = relationship(
        "TrfApprovalStep",
        back_populates="request",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TrfApprovalStep.created_at",
    )


class TrfApprovalStep(Base, ApprovalStepMixin):
    __tablename__ = "trf_approval_steps"

    request_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("travel_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )

    request: Mapped[TravelRequest] = relationship(TravelRequest, back_populates="steps")
