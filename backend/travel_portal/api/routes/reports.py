"""CSV report exports."""
import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.deps import require_permission
from travel_portal.db.session import get_session
from travel_portal.services import reports as reports_svc
from travel_portal.services.modules import MODULES, VIEW_REPORTS

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{module}.csv", summary="Export a module's requests as CSV")
async def export_module_csv(
    module: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(require_permission(VIEW_REPORTS)),
    status_filter: str | None = Query(default=None, alias="status"),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
):
    if module not in MODULES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown module '{module}'.")
    rows = await reports_svc.fetch_report_rows(db, module, status_filter, date_from, date_to)
    logger.info("CSV export %s: %d rows for %s", module, len(rows), current_user.email)

    def _generate():
        yield reports_svc.render_csv(module, rows)

    return StreamingResponse(
        _generate(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={module}-report.csv"},
    )
