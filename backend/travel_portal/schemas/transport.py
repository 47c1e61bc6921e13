"""Pydantic schemas for transport requests."""
from datetime import date

from pydantic import BaseModel, Field

from travel_portal.schemas.common import RequestOut, RequestorFields, WorkflowDetail


class TransportLeg(BaseModel):
    travel_date: date
    from_location: str = Field(min_length=1)
    to_location: str = Field(min_length=1)
    departure_time: str | None = None
    transport_type: str = Field(min_length=1)
    number_of_passengers: int = Field(default=1, ge=1)


class TransportCreate(RequestorFields):
    json_fields = ("transport_details",)

    tsr_reference: str | None = None
    purpose: str = Field(min_length=1)
    position: str | None = None
    cost_center: str | None = None
    tel_email: str | None = None
    transport_details: list[TransportLeg] = Field(min_length=1)
    additional_comments: str | None = None


class TransportUpdate(RequestorFields):
    json_fields = ("transport_details",)
    required_fields = ("requestor_name", "purpose", "transport_details")

    tsr_reference: str | None = None
    purpose: str | None = Field(default=None, min_length=1)
    position: str | None = None
    cost_center: str | None = None
    tel_email: str | None = None
    transport_details: list[TransportLeg] | None = None
    additional_comments: str | None = None


class TransportOut(RequestOut):
    tsr_reference: str | None
    purpose: str
    position: str | None
    cost_center: str | None
    tel_email: str | None
    transport_details: list[dict]
    additional_comments: str | None


class TransportDetail(TransportOut, WorkflowDetail):
    pass


class TransportListResponse(BaseModel):
    items: list[TransportOut]
    total: int
    page: int
    page_size: int
