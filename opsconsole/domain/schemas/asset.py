"""Pydantic schemas for the assets API."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from opsconsole.domain.models.asset import AssetCategory, AssetStatus


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class AssetCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Asset name is required")
    category: AssetCategory
    serial_number: Optional[str] = None
    status: AssetStatus = AssetStatus.AVAILABLE
    location: Optional[str] = None
    purchase_date: Optional[datetime] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    vendor_id: Optional[str] = None
    warranty_expiry: Optional[datetime] = None
    depreciation_rate: float = Field(0.0, ge=0, le=100)
    notes: Optional[str] = None


class AssetUpdateRequest(BaseModel):
    """Partial update. Assignment and retirement have dedicated endpoints."""

    name: Optional[str] = Field(None, min_length=1)
    category: Optional[AssetCategory] = None
    serial_number: Optional[str] = None
    status: Optional[AssetStatus] = None
    location: Optional[str] = None
    purchase_date: Optional[datetime] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    vendor_id: Optional[str] = None
    warranty_expiry: Optional[datetime] = None
    depreciation_rate: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = None


class AssignRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="Valid user ID is required")


class MaintenanceRequest(BaseModel):
    date: datetime
    description: str = Field(..., min_length=1)
    cost: float = Field(0.0, ge=0)
    performed_by: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MaintenanceResponse(BaseModel):
    date: datetime
    description: str
    cost: float
    performed_by: Optional[str] = None

    model_config = {"from_attributes": True}


class AssetResponse(BaseModel):
    id: str
    name: str
    category: AssetCategory
    serial_number: Optional[str] = None
    status: AssetStatus
    location: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_date: Optional[datetime] = None
    purchase_date: Optional[datetime] = None
    purchase_price: Optional[float] = None
    vendor_id: Optional[str] = None
    warranty_expiry: Optional[datetime] = None
    depreciation_rate: float
    current_value: Optional[float] = None
    maintenance_history: List[MaintenanceResponse] = []
    notes: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssetStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_category: Dict[str, int]
    total_value: float
    maintenance_due: int
    warranty_expiring_soon: int
