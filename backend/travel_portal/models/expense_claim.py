from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travel_portal.db.base import Base, TimestampMixin, UUIDMixin
from travel_portal.models.request_base import ApprovalStepMixin, RequestMixin


class ExpenseClaim(Base, RequestMixin):
    __tablename__ = "expense_claims"

    trf_id: Mapped[str | None] = mapped_column(
        String(40), ForeignKey("travel_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    document_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    claim_for_month_of: Mapped[date] = mapped_column(Date, nullable=False)
    purpose_of_claim: Mapped[str] = mapped_column(Text, nullable=False)
    cost_center: Mapped[str | None] = mapped_column(String(50), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_medical_claim: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    less_advance_taken: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    balance_claim_repayment: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    items: Mapped[list["ExpenseClaimItem"]] = relationship(
        "ExpenseClaimItem",
        back_populates="claim",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="ExpenseClaimItem.item_date",
    )
    steps: Mapped[list["ClaimApprovalStep"]] = relationship(
        "ClaimApprovalStep",
        back_populates="request",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ClaimApprovalStep.created_at",
    )


class ExpenseClaimItem(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "expense_claim_items"

    claim_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("expense_claims.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    official_mileage_km: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    transport: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    hotel_accommodation_allowance: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    out_station_allowance_meal: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    miscellaneous_allowance: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    other_expenses: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    claim: Mapped[ExpenseClaim] = relationship(ExpenseClaim, back_populates="items")


class ClaimApprovalStep(Base, ApprovalStepMixin):
    __tablename__ = "claims_approval_steps"

    request_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("expense_claims.id", ondelete="CASCADE"), nullable=False, index=True
    )

    request: Mapped[ExpenseClaim] = relationship(ExpenseClaim, back_populates="steps")
