"""CSV exports of request data for reporting users."""
import csv
import io
from collections.abc import Iterable
from datetime import date, datetime, time, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.services.modules import get_module

BASE_COLUMNS = ("id", "requestor_name", "staff_id", "department", "status", "submitted_at", "created_at")

MODULE_COLUMNS: dict[str, tuple[str, ...]] = {
    "trf": ("travel_type", "purpose", "cost_center", "estimated_cost"),
    "claims": ("claim_for_month_of", "purpose_of_claim", "cost_center", "total_amount", "balance_claim_repayment"),
    "visa": ("destination", "visa_type", "trip_start_date", "trip_end_date"),
    "transport": ("purpose", "cost_center", "tsr_reference"),
    "accommodation": ("location", "check_in_date", "check_out_date", "number_of_guests"),
}


def report_columns(module: str) -> tuple[str, ...]:
    return BASE_COLUMNS + MODULE_COLUMNS.get(module, ())


async def fetch_report_rows(
    db: AsyncSession,
    module: str,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list:
    config = get_module(module)
    model = config.model
    stmt = select(model).order_by(model.created_at.asc())
    if status:
        wanted = config.workflow.normalize_status(status)
        aliases = {alias for alias, canonical in config.workflow.status_aliases.items() if canonical == wanted}
        stmt = stmt.where(model.status.in_({wanted, *aliases}))
    if date_from:
        stmt = stmt.where(model.created_at >= datetime.combine(date_from, time.min, tzinfo=timezone.utc))
    if date_to:
        stmt = stmt.where(model.created_at <= datetime.combine(date_to, time.max, tzinfo=timezone.utc))
    return list((await db.execute(stmt)).scalars().all())


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def render_csv(module: str, rows: Iterable) -> str:
    columns = report_columns(module)
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(getattr(row, column, None)) for column in columns])
    return buf.getvalue()
