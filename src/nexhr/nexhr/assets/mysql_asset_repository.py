from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import AssetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_read, to_float
from .model import Asset
from .repository import AssetRepository

_COLUMNS = """
    asset_id, customer_id, asset_name, asset_type, serial_number, asset_status,
    asset_value, purchase_date, employee_id, bill_path
"""


def _row_to_asset(r: dict[str, Any]) -> Asset:
    return Asset(
        asset_id=int(r["asset_id"]),
        customer_id=int(r["customer_id"]),
        name=r["asset_name"],
        asset_type=r.get("asset_type") or "",
        serial_number=r.get("serial_number") or "",
        status=AssetStatus(r["asset_status"]),
        value=to_float(r.get("asset_value")),
        purchase_date=r.get("purchase_date"),
        employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
        bill_path=r.get("bill_path"),
    )


class MySQLAssetRepository(AssetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, asset: Asset) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO assets(
                    customer_id, asset_name, asset_type, serial_number, asset_status,
                    asset_value, purchase_date, employee_id, bill_path
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(asset.customer_id),
                    asset.name,
                    asset.asset_type,
                    asset.serial_number,
                    asset.status.value,
                    asset.value,
                    asset.purchase_date,
                    asset.employee_id,
                    asset.bill_path,
                ),
            )
            return int(cur.lastrowid)

    @retry_read
    def get_by_id(self, customer_id: int, asset_id: int) -> Optional[Asset]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM assets WHERE customer_id=%s AND asset_id=%s",
                (int(customer_id), int(asset_id)),
            )
            r = fetchone(cur)
            return _row_to_asset(r) if r else None

    @retry_read
    def get_by_serial(self, customer_id: int, serial_number: str) -> Optional[Asset]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM assets WHERE customer_id=%s AND serial_number=%s",
                (int(customer_id), serial_number),
            )
            r = fetchone(cur)
            return _row_to_asset(r) if r else None

    @retry_read
    def list_assets(
        self,
        customer_id: int,
        *,
        status: Optional[AssetStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Asset]:
        clauses = ["customer_id=%s"]
        params: list[object] = [int(customer_id)]

        if status is not None:
            clauses.append("asset_status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM assets WHERE {where} ORDER BY asset_name, asset_id",
                tuple(params),
            )
            return [_row_to_asset(r) for r in fetchall(cur)]

    def update(self, asset: Asset) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE assets
                SET asset_name=%s, asset_type=%s, serial_number=%s, asset_status=%s,
                    asset_value=%s, purchase_date=%s, employee_id=%s, bill_path=%s
                WHERE customer_id=%s AND asset_id=%s
                """,
                (
                    asset.name,
                    asset.asset_type,
                    asset.serial_number,
                    asset.status.value,
                    asset.value,
                    asset.purchase_date,
                    asset.employee_id,
                    asset.bill_path,
                    int(asset.customer_id),
                    int(asset.asset_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, customer_id: int, asset_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM assets WHERE customer_id=%s AND asset_id=%s",
                (int(customer_id), int(asset_id)),
            )
            return cur.rowcount > 0
