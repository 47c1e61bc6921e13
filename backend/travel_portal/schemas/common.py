"""Schemas shared by every request module."""
from datetime import datetime
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


# ─── Payload base ───

class RequestPayload(BaseModel):
    """Body of a create/update call; `to_payload` yields column values."""

    # Fields stored in JSON columns; dumped in JSON mode so dates become strings.
    json_fields: ClassVar[tuple[str, ...]] = ()
    # NOT NULL columns; a partial update may omit them but not set them to null.
    required_fields: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_required(self):
        nulls = [
            name for name in self.required_fields
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null.")
        return self

    def to_payload(self, exclude_unset: bool = False) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=exclude_unset)
        for name in self.json_fields:
            if data.get(name) is not None:
                data[name] = self.model_dump(mode="json", include={name})[name]
        return data


class RequestorFields(RequestPayload):
    """Optional override of the requestor identity (e.g. booking for an external party)."""

    requestor_name: str | None = Field(default=None, max_length=255)
    staff_id: str | None = Field(default=None, max_length=50)
    department: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None


# ─── Workflow ───

class ActionRequest(BaseModel):
    action: str = Field(description="approve, reject or cancel")
    comments: str | None = None


class ProcessRequest(BaseModel):
    action: Literal["process", "complete"] = "complete"
    details: dict[str, Any] | None = None
    comments: str | None = None


class CancelRequest(BaseModel):
    comments: str | None = None


class ActionResult(BaseModel):
    id: str
    previous_status: str
    status: str
    message: str


class WorkflowStepOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: str
    name: str
    status: str
    date: datetime | None = None
    comments: str | None = None


class ApprovalStepOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: str
    actor_name: str
    status: str
    comments: str | None
    created_at: datetime


# ─── Output base ───

class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    requestor_name: str
    staff_id: str | None
    department: str | None
    email: str | None
    status: str
    submitted_at: datetime | None
    processing_details: dict[str, Any] | None = None
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class WorkflowDetail(BaseModel):
    workflow_history: list[WorkflowStepOut] = []
    approval_steps: list[ApprovalStepOut] = []
    available_actions: list[str] = []
