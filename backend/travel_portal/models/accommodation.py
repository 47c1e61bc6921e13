from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_portal.db.base import Base
from travel_portal.models.request_base import ApprovalStepMixin, RequestMixin


class AccommodationRequest(Base, RequestMixin):
    __tablename__ = "accommodation_requests"

    trf_id: Mapped[str | None] = mapped_column(
        String(40), ForeignKey("travel_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    accommodation_type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Staff House, Hotel
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)  # room sharing constraint
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    steps: Mapped[list["AccommodationApprovalStep"]] = relationship(
        "AccommodationApprovalStep",
        back_populates="request",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AccommodationApprovalStep.created_at",
    )


class AccommodationApprovalStep(Base, ApprovalStepMixin):
    __tablename__ = "accommodation_approval_steps"

    request_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("accommodation_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )

    request: Mapped[AccommodationRequest] = relationship(AccommodationRequest, back_populates="steps")
