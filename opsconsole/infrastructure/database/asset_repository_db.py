"""DB-backed asset repository. Maintenance history is stored as a JSON column."""

from typing import Any, Dict

from sqlalchemy import func, select

from opsconsole.domain.models.asset import Asset, AssetCategory, AssetStatus, MaintenanceRecord
from opsconsole.infrastructure.database.filters import to_clause
from opsconsole.infrastructure.database.models import AssetRow
from opsconsole.infrastructure.database.repository import SqlRepository, utc
from opsconsole.security.predicates import Predicate


class DbAssetRepository(SqlRepository[Asset]):
    """Implements AssetRepository protocol."""

    model = AssetRow

    def _to_domain(self, row: AssetRow) -> Asset:
        return Asset(
            id=row.id,
            name=row.name,
            category=AssetCategory(row.category),
            created_by=row.created_by,
            serial_number=row.serial_number,
            status=AssetStatus(row.status),
            location=row.location,
            assigned_to=row.assigned_to,
            assigned_date=utc(row.assigned_date),
            purchase_date=utc(row.purchase_date),
            purchase_price=row.purchase_price,
            vendor_id=row.vendor_id,
            warranty_expiry=utc(row.warranty_expiry),
            depreciation_rate=row.depreciation_rate or 0.0,
            current_value=row.current_value,
            maintenance_history=[MaintenanceRecord.from_dict(m) for m in row.maintenance_history or []],
            notes=row.notes,
            created_at=utc(row.created_at),
            updated_at=utc(row.updated_at),
        )

    def _to_values(self, asset: Asset) -> Dict[str, Any]:
        return {
            "id": asset.id,
            "name": asset.name,
            "category": asset.category.value,
            "serial_number": asset.serial_number,
            "status": asset.status.value,
            "location": asset.location,
            "assigned_to": asset.assigned_to,
            "assigned_date": asset.assigned_date,
            "purchase_date": asset.purchase_date,
            "purchase_price": asset.purchase_price,
            "vendor_id": asset.vendor_id,
            "warranty_expiry": asset.warranty_expiry,
            "depreciation_rate": asset.depreciation_rate,
            "current_value": asset.current_value,
            "maintenance_history": [m.to_dict() for m in asset.maintenance_history],
            "notes": asset.notes,
            "created_by": asset.created_by,
            "created_at": asset.created_at,
            "updated_at": asset.updated_at,
        }

    async def sum_current_value(self, predicate: Predicate) -> float:
        stmt = select(func.coalesce(func.sum(AssetRow.current_value), 0.0)).where(
            to_clause(predicate, AssetRow)
        )
        result = await self._session.execute(stmt)
        return round(float(result.scalar_one()), 2)
