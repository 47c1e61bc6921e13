"""Pydantic schemas for visa applications and their documents."""
import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from travel_portal.schemas.common import RequestOut, RequestorFields, WorkflowDetail


class VisaCreate(RequestorFields):
    trf_id: str | None = None
    destination: str = Field(min_length=1, max_length=100)
    visa_type: str = Field(min_length=1, max_length=50)
    travel_purpose: str = Field(min_length=1)
    passport_number: str | None = None
    passport_expiry_date: date | None = None
    trip_start_date: date | None = None
    trip_end_date: date | None = None

    @model_validator(mode="after")
    def trip_dates_in_order(self):
        if self.trip_start_date and self.trip_end_date and self.trip_end_date < self.trip_start_date:
            raise ValueError("trip_end_date must not be before trip_start_date.")
        return self


class VisaUpdate(RequestorFields):
    required_fields = ("requestor_name", "destination", "visa_type", "travel_purpose")

    trf_id: str | None = None
    destination: str | None = Field(default=None, min_length=1, max_length=100)
    visa_type: str | None = None
    travel_purpose: str | None = None
    passport_number: str | None = None
    passport_expiry_date: date | None = None
    trip_start_date: date | None = None
    trip_end_date: date | None = None


class VisaDocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    document_type: str
    file_name: str
    content_type: str
    size_bytes: int
    created_at: datetime


class VisaOut(RequestOut):
    trf_id: str | None
    destination: str
    visa_type: str
    travel_purpose: str
    passport_number: str | None
    passport_expiry_date: date | None
    trip_start_date: date | None
    trip_end_date: date | None
    rejection_reason: str | None


class VisaDetail(VisaOut, WorkflowDetail):
    documents: list[VisaDocumentOut] = []


class VisaListResponse(BaseModel):
    items: list[VisaOut]
    total: int
    page: int
    page_size: int
