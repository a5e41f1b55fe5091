"""Pydantic schemas for the users API."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from opsconsole.security.roles import Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserCreateRequest(BaseModel):
    email: str = Field(..., min_length=3, description="Unique login email")
    name: str = Field(..., min_length=1)
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None

    @field_validator("email")
    @classmethod
    def email_must_look_valid(cls, v: str) -> str:
        v = v.strip().lower()
        local, sep, domain = v.partition("@")
        if not sep or not local or "." not in domain:
            raise ValueError("Valid email is required")
        return v

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class UserUpdateRequest(BaseModel):
    """Partial update. Which fields a caller may set depends on the caller's role."""

    name: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = None
    avatar: Optional[str] = None
    is_active: Optional[bool] = None
    role: Optional[Role] = None


class RoleChangeRequest(BaseModel):
    role: Role


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    department: Optional[str] = None
    is_active: bool
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserStats(BaseModel):
    total: int
    active: int
    by_role: Dict[str, int]
    by_department: Dict[str, int]
