"""Pydantic schemas for accommodation requests."""
from datetime import date

from pydantic import BaseModel, Field, model_validator

from travel_portal.schemas.common import RequestOut, RequestorFields, WorkflowDetail


class AccommodationCreate(RequestorFields):
    trf_id: str | None = None
    location: str = Field(min_length=1, max_length=100)
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(default=1, ge=1)
    accommodation_type: str | None = None
    gender: str | None = None
    special_requests: str | None = None

    @model_validator(mode="after")
    def check_out_after_check_in(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date.")
        return self


class AccommodationUpdate(RequestorFields):
    required_fields = ("requestor_name", "location", "check_in_date", "check_out_date", "number_of_guests")

    trf_id: str | None = None
    location: str | None = Field(default=None, min_length=1, max_length=100)
    check_in_date: date | None = None
    check_out_date: date | None = None
    number_of_guests: int | None = Field(default=None, ge=1)
    accommodation_type: str | None = None
    gender: str | None = None
    special_requests: str | None = None


class AccommodationOut(RequestOut):
    trf_id: str | None
    location: str
    check_in_date: date
    check_out_date: date
    number_of_guests: int
    accommodation_type: str | None
    gender: str | None
    special_requests: str | None


class AccommodationDetail(AccommodationOut, WorkflowDetail):
    pass


class AccommodationListResponse(BaseModel):
    items: list[AccommodationOut]
    total: int
    page: int
    page_size: int
