"""Pydantic schemas for expense claims."""
import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from travel_portal.schemas.common import RequestOut, RequestorFields, WorkflowDetail


class ClaimItemIn(BaseModel):
    item_date: date | None = None
    details: str = ""
    official_mileage_km: Decimal | None = Field(default=None, ge=0)
    transport: Decimal | None = Field(default=None, ge=0)
    hotel_accommodation_allowance: Decimal | None = Field(default=None, ge=0)
    out_station_allowance_meal: Decimal | None = Field(default=None, ge=0)
    miscellaneous_allowance: Decimal | None = Field(default=None, ge=0)
    other_expenses: Decimal | None = Field(default=None, ge=0)


class ClaimItemOut(ClaimItemIn):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID


class ClaimCreate(RequestorFields):
    trf_id: str | None = None
    document_type: str | None = None
    claim_for_month_of: date
    purpose_of_claim: str = Field(min_length=1)
    cost_center: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    is_medical_claim: bool = False
    total_amount: Decimal = Field(ge=0)
    less_advance_taken: Decimal | None = Field(default=None, ge=0)
    balance_claim_repayment: Decimal | None = None
    items: list[ClaimItemIn] = []


class ClaimUpdate(RequestorFields):
    required_fields = (
        "requestor_name", "claim_for_month_of", "purpose_of_claim", "is_medical_claim", "total_amount",
    )

    trf_id: str | None = None
    document_type: str | None = None
    claim_for_month_of: date | None = None
    purpose_of_claim: str | None = Field(default=None, min_length=1)
    cost_center: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    is_medical_claim: bool | None = None
    total_amount: Decimal | None = Field(default=None, ge=0)
    less_advance_taken: Decimal | None = Field(default=None, ge=0)
    balance_claim_repayment: Decimal | None = None
    items: list[ClaimItemIn] | None = None


class ClaimOut(RequestOut):
    trf_id: str | None
    document_type: str | None
    claim_for_month_of: date
    purpose_of_claim: str
    cost_center: str | None
    bank_name: str | None
    account_number: str | None
    is_medical_claim: bool
    total_amount: Decimal
    less_advance_taken: Decimal | None
    balance_claim_repayment: Decimal | None
    items: list[ClaimItemOut] = []


class ClaimDetail(ClaimOut, WorkflowDetail):
    pass


class ClaimListResponse(BaseModel):
    items: list[ClaimOut]
    total: int
    page: int
    page_size: int
