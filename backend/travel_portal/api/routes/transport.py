"""Transport request endpoints."""
from travel_portal.api.request_routes import build_request_router
from travel_portal.schemas.transport import (
    TransportCreate,
    TransportDetail,
    TransportListResponse,
    TransportOut,
    TransportUpdate,
)

router = build_request_router(
    "transport",
    create_schema=TransportCreate,
    update_schema=TransportUpdate,
    out_schema=TransportOut,
    detail_schema=TransportDetail,
    list_schema=TransportListResponse,
)
