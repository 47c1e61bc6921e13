import uuid

from pydantic import BaseModel, field_validator


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    staff_id: str | None
    department: str | None
    role_name: str | None
    permissions: list[str]
    is_active: bool

    model_config = {"from_attributes": True}

    @field_validator("permissions", mode="before")
    @classmethod
    def sort_permissions(cls, value):
        return sorted(value or [])
