"""Pydantic schemas for the vendors API."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ContactSchema(BaseModel):
    name: str = Field(..., min_length=1, description="Contact name is required")
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("email")
    @classmethod
    def email_must_look_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if "@" not in v:
            raise ValueError("Valid email required")
        return v.strip()


class VendorCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Vendor name is required")
    category: Optional[str] = None
    contacts: List[ContactSchema] = []
    address: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None

    @field_validator("website")
    @classmethod
    def website_must_be_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("Valid URL required")
        return v


class VendorUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    contacts: Optional[List[ContactSchema]] = None
    address: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class ContractRequest(BaseModel):
    title: str = Field(..., min_length=1, description="Contract title is required")
    start_date: datetime
    end_date: datetime
    value: float = Field(0.0, ge=0)
    document: Optional[str] = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "ContractRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ContractUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    value: Optional[float] = Field(None, ge=0)
    document: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ContractResponse(BaseModel):
    id: str
    title: str
    start_date: datetime
    end_date: datetime
    value: float
    document: Optional[str] = None

    model_config = {"from_attributes": True}


class VendorResponse(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    contacts: List[ContactSchema] = []
    address: Optional[str] = None
    website: Optional[str] = None
    contracts: List[ContractResponse] = []
    rating: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VendorStats(BaseModel):
    total: int
    active: int
    by_category: Dict[str, int]
    avg_rating: float
    contracts_expiring_soon: int
    total_contract_value: float
