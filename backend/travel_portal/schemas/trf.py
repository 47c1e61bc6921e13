"""Pydantic schemas for travel requests (TRF)."""
from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from travel_portal.schemas.common import RequestOut, RequestorFields, WorkflowDetail

TravelType = Literal["Domestic", "Overseas", "Home Leave Passage", "External Parties"]


class ItinerarySegment(BaseModel):
    travel_date: date
    origin: str = Field(min_length=1, max_length=100)
    destination: str = Field(min_length=1, max_length=100)
    flight_number: str | None = None
    remarks: str | None = None


class TrfCreate(RequestorFields):
    json_fields = ("itinerary",)

    travel_type: TravelType
    purpose: str = Field(min_length=1)
    position: str | None = None
    cost_center: str | None = None
    estimated_cost: Decimal | None = Field(default=None, ge=0)
    itinerary: list[ItinerarySegment] = Field(min_length=1)
    external_party_name: str | None = None
    additional_comments: str | None = None

    @model_validator(mode="after")
    def external_party_needs_name(self):
        if self.travel_type == "External Parties" and not self.external_party_name:
            raise ValueError("external_party_name is required for External Parties travel.")
        return self


class TrfUpdate(RequestorFields):
    json_fields = ("itinerary",)
    required_fields = ("requestor_name", "travel_type", "purpose", "itinerary")

    travel_type: TravelType | None = None
    purpose: str | None = Field(default=None, min_length=1)
    position: str | None = None
    cost_center: str | None = None
    estimated_cost: Decimal | None = Field(default=None, ge=0)
    itinerary: list[ItinerarySegment] | None = None
    external_party_name: str | None = None
    additional_comments: str | None = None


class TrfOut(RequestOut):
    travel_type: str
    purpose: str
    position: str | None
    cost_center: str | None
    estimated_cost: Decimal | None
    itinerary: list[dict]
    external_party_name: str | None
    additional_comments: str | None


class TrfDetail(TrfOut, WorkflowDetail):
    pass


class TrfListResponse(BaseModel):
    items: list[TrfOut]
    total: int
    page: int
    page_size: int
