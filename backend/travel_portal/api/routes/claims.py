"""Expense claim endpoints."""
from travel_portal.api.request_routes import build_request_router
from travel_portal.schemas.claims import ClaimCreate, ClaimDetail, ClaimListResponse, ClaimOut, ClaimUpdate

router = build_request_router(
    "claims",
    create_schema=ClaimCreate,
    update_schema=ClaimUpdate,
    out_schema=ClaimOut,
    detail_schema=ClaimDetail,
    list_schema=ClaimListResponse,
)
