"""Human-readable request identifiers.

Format: TYPE-YYYYMMDD-HHMM-CONTEXT-XXXX, e.g. TSR-20250702-1423-NYC-PCYX.
Claims carry no context and use two random blocks: CLM-20250702-1423-QWSDF-P4Z5.
The random alphabet leaves out 0/O and 1/I so ids can be read over the phone.
"""
import re
import secrets
from dataclasses import dataclass
from datetime import datetime

UNIQUE_ID_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REQUEST_TYPES = ("TSR", "VIS", "ACCOM", "CLM", "TRN")
CLAIM_CONTEXT = "CLAIM"
DEFAULT_CONTEXT = "GEN"

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class ParsedRequestId:
    type: str
    timestamp: str
    context: str
    unique_id: str
    date: datetime


def generate_unique_id(length: int = 4) -> str:
    return "".join(secrets.choice(UNIQUE_ID_CHARS) for _ in range(length))


def format_date(when: datetime) -> str:
    return when.strftime("%Y%m%d-%H%M")


def validate_context(context: str) -> str:
    """Strip non-alphanumerics, upper-case, cap at 5 characters."""
    return _NON_ALNUM.sub("", context or "").upper()[:5]


def generate_request_id(request_type: str, context: str = "", when: datetime | None = None) -> str:
    if request_type not in REQUEST_TYPES:
        raise ValueError(f"Unknown request type '{request_type}'.")
    timestamp = format_date(when or datetime.now())
    if request_type == "CLM":
        return f"CLM-{timestamp}-{generate_unique_id(5)}-{generate_unique_id(4)}"
    return f"{request_type}-{timestamp}-{validate_context(context) or DEFAULT_CONTEXT}-{generate_unique_id()}"


def parse_request_id(request_id: str) -> ParsedRequestId | None:
    """Split a request id into its parts; None when it is not in the unified format."""
    parts = request_id.split("-")
    if len(parts) != 5:
        return None
    request_type, date_part, time_part, third, fourth = parts
    if request_type not in REQUEST_TYPES:
        return None
    try:
        when = datetime.strptime(f"{date_part}{time_part}", "%Y%m%d%H%M")
    except ValueError:
        return None
    if request_type == "CLM":
        context, unique_id = CLAIM_CONTEXT, f"{third}-{fourth}"
    else:
        context, unique_id = third, fourth
    return ParsedRequestId(
        type=request_type,
        timestamp=f"{date_part}-{time_part}",
        context=context,
        unique_id=unique_id,
        date=when,
    )
