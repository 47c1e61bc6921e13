"""Travel request (TRF) endpoints."""
from travel_portal.api.request_routes import build_request_router
from travel_portal.schemas.trf import TrfCreate, TrfDetail, TrfListResponse, TrfOut, TrfUpdate

router = build_request_router(
    "trf",
    create_schema=TrfCreate,
    update_schema=TrfUpdate,
    out_schema=TrfOut,
    detail_schema=TrfDetail,
    list_schema=TrfListResponse,
)
