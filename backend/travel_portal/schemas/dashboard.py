from datetime import datetime

from pydantic import BaseModel, ConfigDict


class QueueItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    module: str
    id: str
    requestor_name: str
    department: str | None
    status: str
    submitted_at: datetime | None
    created_at: datetime


class ApprovalQueueResponse(BaseModel):
    items: list[QueueItemOut]
    total: int


class DashboardSummary(BaseModel):
    modules: dict[str, dict[str, int]]
    pending_approvals: int
