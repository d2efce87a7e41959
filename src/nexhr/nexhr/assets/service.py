from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.validators import optional_int, optional_text, require_choice, require_non_empty, require_non_negative
from ..core.context import TenantContext
from ..core.enums import AssetStatus, ChangeType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..realtime.notifier import ChangeNotifier
from .model import Asset, AssetStats
from .repository import AssetRepository

logger = logging.getLogger(__name__)

TABLE = "assets"

_EDITABLE_FIELDS = {"name", "asset_type", "serial_number", "status", "value", "purchase_date", "employee_id", "bill_path"}


def asset_to_dict(a: Asset) -> dict:
    return {
        "asset_id": a.asset_id,
        "name": a.name,
        "type": a.asset_type,
        "serial_number": a.serial_number,
        "status": a.status.value,
        "value": a.value,
        "purchase_date": a.purchase_date.strftime("%Y-%m-%d") if a.purchase_date else None,
        "employee_id": a.employee_id,
        "bill_path": a.bill_path,
    }


def summarize_assets(assets: Sequence[Asset]) -> AssetStats:
    by_status = {s: 0 for s in AssetStatus}
    for a in assets:
        by_status[a.status] += 1
    return AssetStats(
        total=len(assets),
        total_value=round(sum(a.value for a in assets), 2),
        assigned=by_status[AssetStatus.ASSIGNED],
        available=by_status[AssetStatus.AVAILABLE],
        in_maintenance=by_status[AssetStatus.IN_MAINTENANCE],
    )


class AssetService:
    """Use case: track company equipment and who holds it.

    An asset with a holder is always Assigned, and an Assigned asset always
    has a holder.
    """

    def __init__(
        self,
        assets: AssetRepository,
        employees: EmployeeRepository,
        *,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self._assets = assets
        self._employees = employees
        self._notifier = notifier

    def _emit(self, change_type: ChangeType, ctx: TenantContext, asset_id: int) -> None:
        if self._notifier:
            self._notifier.emit(TABLE, change_type, customer_id=ctx.customer_id, record_id=asset_id)

    def _validated(self, ctx: TenantContext, asset: Asset) -> Asset:
        if asset.employee_id is not None:
            if not self._employees.get_by_id(ctx.customer_id, asset.employee_id):
                raise NotFoundError("Employee not found")
            if asset.status == AssetStatus.AVAILABLE:
                asset = replace(asset, status=AssetStatus.ASSIGNED)
            elif asset.status == AssetStatus.IN_MAINTENANCE:
                raise ValidationError("An asset in maintenance cannot be assigned")
        elif asset.status == AssetStatus.ASSIGNED:
            raise ValidationError("Choose the employee the asset is assigned to")

        other = self._assets.get_by_serial(ctx.customer_id, asset.serial_number) if asset.serial_number else None
        if other and other.asset_id != asset.asset_id:
            raise ValidationError(f"Serial number {asset.serial_number} is already registered")
        return asset

    def get_asset(self, ctx: TenantContext, asset_id: int) -> Asset:
        asset = self._assets.get_by_id(ctx.customer_id, int(asset_id))
        if not asset:
            raise NotFoundError("Asset not found")
        return asset

    def list_assets(
        self,
        ctx: TenantContext,
        *,
        status: Optional[AssetStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Asset]:
        return self._assets.list_assets(ctx.customer_id, status=status, employee_id=employee_id)

    def list_my_assets(self, ctx: TenantContext) -> Sequence[Asset]:
        return self._assets.list_assets(ctx.customer_id, employee_id=ctx.require_employee())

    def create_asset(
        self,
        ctx: TenantContext,
        *,
        name: str,
        asset_type: str = "",
        serial_number: str = "",
        status=AssetStatus.AVAILABLE,
        value=0,
        purchase_date: Optional[date] = None,
        employee_id=None,
        bill_path: Optional[str] = None,
    ) -> int:
        asset = self._validated(
            ctx,
            Asset(
                asset_id=0,
                customer_id=ctx.customer_id,
                name=require_non_empty(name, "Asset name"),
                asset_type=optional_text(asset_type),
                serial_number=optional_text(serial_number),
                status=require_choice(AssetStatus, status or AssetStatus.AVAILABLE, "asset status"),
                value=require_non_negative(value, "Asset value"),
                purchase_date=purchase_date,
                employee_id=optional_int(employee_id, "Assigned employee"),
                bill_path=optional_text(bill_path) or None,
            ),
        )
        asset_id = self._assets.create(asset)
        logger.info("Asset %s (%s) registered for customer %s", asset_id, asset.name, ctx.customer_id)
        self._emit(ChangeType.INSERT, ctx, asset_id)
        return asset_id

    def update_asset(self, ctx: TenantContext, asset_id: int, **changes) -> Asset:
        current = self.get_asset(ctx, asset_id)

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown asset fields: {', '.join(sorted(unknown))}")

        if "name" in changes:
            changes["name"] = require_non_empty(changes["name"], "Asset name")
        for name in ("asset_type", "serial_number"):
            if name in changes:
                changes[name] = optional_text(changes[name])
        if "status" in changes:
            changes["status"] = require_choice(AssetStatus, changes["status"], "asset status")
        if "value" in changes:
            changes["value"] = require_non_negative(changes["value"], "Asset value")
        if "employee_id" in changes:
            changes["employee_id"] = optional_int(changes["employee_id"], "Assigned employee")
            if changes["employee_id"] is None and "status" not in changes and current.status == AssetStatus.ASSIGNED:
                changes["status"] = AssetStatus.AVAILABLE
        if "bill_path" in changes:
            changes["bill_path"] = optional_text(changes["bill_path"]) or None

        updated = self._validated(ctx, replace(current, **changes))
        if not self._assets.update(updated):
            raise ValidationError("Updating the asset failed")
        self._emit(ChangeType.UPDATE, ctx, current.asset_id)
        return updated

    def assign_asset(self, ctx: TenantContext, asset_id: int, employee_id: Optional[int]) -> Asset:
        """Hand the asset to ``employee_id``, or return it to stock with ``None``."""
        return self.update_asset(ctx, asset_id, employee_id=employee_id)

    def delete_asset(self, ctx: TenantContext, asset_id: int) -> None:
        self.get_asset(ctx, asset_id)
        if not self._assets.delete(ctx.customer_id, int(asset_id)):
            raise ValidationError("Deleting the asset failed")
        logger.info("Deleted asset %s for customer %s", asset_id, ctx.customer_id)
        self._emit(ChangeType.DELETE, ctx, int(asset_id))

    def asset_stats(self, ctx: TenantContext) -> AssetStats:
        return summarize_assets(self._assets.list_assets(ctx.customer_id))
