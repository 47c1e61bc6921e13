"""Accommodation request endpoints."""
from travel_portal.api.request_routes import build_request_router
from travel_portal.schemas.accommodation import (
    AccommodationCreate,
    AccommodationDetail,
    AccommodationListResponse,
    AccommodationOut,
    AccommodationUpdate,
)

router = build_request_router(
    "accommodation",
    create_schema=AccommodationCreate,
    update_schema=AccommodationUpdate,
    out_schema=AccommodationOut,
    detail_schema=AccommodationDetail,
    list_schema=AccommodationListResponse,
)
