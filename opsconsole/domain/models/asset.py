"""Domain model for assets: lifecycle status, assignment, depreciation, maintenance history."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from opsconsole.domain.exceptions import AssetRetiredError, DomainValidationError
from opsconsole.domain.models.common import aware, parse_datetime

_SECONDS_PER_YEAR = 365.25 * 24 * 60 * 60


class AssetCategory(str, Enum):
    HARDWARE = "hardware"
    SOFTWARE = "software"
    FURNITURE = "furniture"
    VEHICLE = "vehicle"
    OTHER = "other"


class AssetStatus(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in-use"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


@dataclass(frozen=True)
class MaintenanceRecord:
    date: datetime
    description: str
    cost: float = 0.0
    performed_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": aware(self.date).isoformat(),
            "description": self.description,
            "cost": self.cost,
            "performed_by": self.performed_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaintenanceRecord":
        return cls(
            date=parse_datetime(data["date"]),
            description=data["description"],
            cost=float(data.get("cost") or 0.0),
            performed_by=data.get("performed_by"),
        )


def depreciated_value(
    purchase_price: Optional[float],
    depreciation_rate: Optional[float],
    purchase_date: Optional[datetime],
    now: datetime,
) -> float:
    """
    purchase_price * (1 - rate/100) ** years_owned, rounded to cents, floored at 0.
    With any input missing the purchase price (or 0) is returned unchanged.
    """
    if not purchase_date or not purchase_price or not depreciation_rate:
        return float(purchase_price or 0)
    years_owned = (aware(now) - aware(purchase_date)).total_seconds() / _SECONDS_PER_YEAR
    factor = (1 - depreciation_rate / 100) ** years_owned
    return max(0.0, round(purchase_price * factor, 2))


@dataclass
class Asset:
    """Asset entity. Status changes go through assign/unassign/retire."""

    id: str
    name: str
    category: AssetCategory
    created_by: str
    serial_number: Optional[str] = None
    status: AssetStatus = AssetStatus.AVAILABLE
    location: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_date: Optional[datetime] = None
    purchase_date: Optional[datetime] = None
    purchase_price: Optional[float] = None
    vendor_id: Optional[str] = None
    warranty_expiry: Optional[datetime] = None
    depreciation_rate: float = 0.0
    current_value: Optional[float] = None
    maintenance_history: List[MaintenanceRecord] = field(default_factory=list)
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not 0 <= self.depreciation_rate <= 100:
            raise DomainValidationError("depreciation_rate must be between 0 and 100")

    def refresh_value(self, now: Optional[datetime] = None) -> float:
        self.current_value = depreciated_value(
            self.purchase_price,
            self.depreciation_rate,
            self.purchase_date,
            now or datetime.now(timezone.utc),
        )
        return self.current_value

    def assign(self, user_id: str, now: Optional[datetime] = None) -> None:
        if self.status is AssetStatus.RETIRED:
            raise AssetRetiredError("Cannot assign retired asset")
        self.assigned_to = user_id
        self.assigned_date = now or datetime.now(timezone.utc)
        self.status = AssetStatus.IN_USE

    def unassign(self) -> None:
        self.assigned_to = None
        self.assigned_date = None
        if self.status is not AssetStatus.RETIRED:
            self.status = AssetStatus.AVAILABLE

    def retire(self) -> None:
        self.status = AssetStatus.RETIRED
        self.assigned_to = None
        self.assigned_date = None

    def add_maintenance(self, record: MaintenanceRecord) -> None:
        self.maintenance_history.append(record)

    def to_record(self) -> Dict[str, Any]:
        """Flat relation view used by scope checks and in-memory filters."""
        return {
            "id": self.id,
            "name": self.name,
            "serial_number": self.serial_number,
            "location": self.location,
            "category": self.category.value,
            "status": self.status.value,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
        }
