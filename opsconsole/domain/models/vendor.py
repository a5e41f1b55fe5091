"""Domain model for vendors and their contracts."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from opsconsole.domain.exceptions import DomainValidationError, EntityNotFoundError
from opsconsole.domain.models.common import aware, parse_datetime


@dataclass(frozen=True)
class VendorContact:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "email": self.email, "phone": self.phone, "role": self.role}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VendorContact":
        return cls(
            name=data["name"],
            email=data.get("email"),
            phone=data.get("phone"),
            role=data.get("role"),
        )


@dataclass(frozen=True)
class Contract:
    id: str
    title: str
    start_date: datetime
    end_date: datetime
    value: float = 0.0
    document: Optional[str] = None

    def __post_init__(self) -> None:
        if aware(self.end_date) < aware(self.start_date):
            raise DomainValidationError("Contract end_date must not be before start_date")

    def is_active_at(self, now: datetime) -> bool:
        return aware(self.end_date) >= aware(now)

    def expires_between(self, start: datetime, end: datetime) -> bool:
        return aware(start) <= aware(self.end_date) <= aware(end)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start_date": aware(self.start_date).isoformat(),
            "end_date": aware(self.end_date).isoformat(),
            "value": self.value,
            "document": self.document,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contract":
        return cls(
            id=data["id"],
            title=data["title"],
            start_date=parse_datetime(data["start_date"]),
            end_date=parse_datetime(data["end_date"]),
            value=float(data.get("value") or 0.0),
            document=data.get("document"),
        )


@dataclass
class Vendor:
    id: str
    name: str
    created_by: str
    category: Optional[str] = None
    contacts: List[VendorContact] = field(default_factory=list)
    address: Optional[str] = None
    website: Optional[str] = None
    contracts: List[Contract] = field(default_factory=list)
    rating: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise DomainValidationError("rating must be between 1 and 5")

    def add_contract(
        self,
        title: str,
        start_date: datetime,
        end_date: datetime,
        value: float = 0.0,
        document: Optional[str] = None,
    ) -> Contract:
        contract = Contract(
            id=str(uuid.uuid4()),
            title=title,
            start_date=start_date,
            end_date=end_date,
            value=value,
            document=document,
        )
        self.contracts.append(contract)
        return contract

    def update_contract(self, contract_id: str, **changes: Any) -> Contract:
        index = self._contract_index(contract_id)
        updated = replace(self.contracts[index], **changes)
        self.contracts[index] = updated
        return updated

    def remove_contract(self, contract_id: str) -> None:
        del self.contracts[self._contract_index(contract_id)]

    def deactivate(self) -> None:
        self.is_active = False

    def _contract_index(self, contract_id: str) -> int:
        for i, contract in enumerate(self.contracts):
            if contract.id == contract_id:
                return i
        raise EntityNotFoundError("Contract not found")

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "is_active": self.is_active,
            "created_by": self.created_by,
        }
