"""DB-backed vendor repository. Contacts and contracts are embedded JSON documents."""

from typing import Any, Dict

from opsconsole.domain.models.vendor import Contract, Vendor, VendorContact
from opsconsole.infrastructure.database.models import VendorRow
from opsconsole.infrastructure.database.repository import SqlRepository, utc


class DbVendorRepository(SqlRepository[Vendor]):
    model = VendorRow

    def _to_domain(self, row: VendorRow) -> Vendor:
        return Vendor(
            id=row.id,
            name=row.name,
            created_by=row.created_by,
            category=row.category,
            contacts=[VendorContact.from_dict(c) for c in row.contacts or []],
            address=row.address,
            website=row.website,
            contracts=[Contract.from_dict(c) for c in row.contracts or []],
            rating=row.rating,
            notes=row.notes,
            is_active=row.is_active,
            created_at=utc(row.created_at),
            updated_at=utc(row.updated_at),
        )

    def _to_values(self, vendor: Vendor) -> Dict[str, Any]:
        return {
            "id": vendor.id,
            "name": vendor.name,
            "category": vendor.category,
            "contacts": [c.to_dict() for c in vendor.contacts],
            "address": vendor.address,
            "website": vendor.website,
            "contracts": [c.to_dict() for c in vendor.contracts],
            "rating": vendor.rating,
            "notes": vendor.notes,
            "is_active": vendor.is_active,
            "created_by": vendor.created_by,
            "created_at": vendor.created_at,
            "updated_at": vendor.updated_at,
        }
