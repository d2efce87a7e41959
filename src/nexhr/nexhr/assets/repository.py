from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AssetStatus
from .model import Asset


class AssetRepository(Protocol):
    def create(self, asset: Asset) -> int:
        """Insert ``asset`` (its ``asset_id`` is ignored) and return the new id."""
        raise NotImplementedError

    def get_by_id(self, customer_id: int, asset_id: int) -> Optional[Asset]:
        raise NotImplementedError

    def get_by_serial(self, customer_id: int, serial_number: str) -> Optional[Asset]:
        raise NotImplementedError

    def list_assets(
        self,
        customer_id: int,
        *,
        status: Optional[AssetStatus] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Asset]:
        raise NotImplementedError

    def update(self, asset: Asset) -> bool:
        raise NotImplementedError

    def delete(self, customer_id: int, asset_id: int) -> bool:
        raise NotImplementedError
