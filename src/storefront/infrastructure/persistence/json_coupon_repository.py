"""JSON-file-backed implementation of CouponRepository."""

from __future__ import annotations

from pathlib import Path

from storefront.domain.model.coupon import Coupon, normalize_code
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.infrastructure.persistence.json_store import JsonFileStore


class JsonCouponRepository(CouponRepository):

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._store = JsonFileStore(file_path, lock_timeout)

    def get_by_code(self, code: str) -> Coupon | None:
        wanted = normalize_code(code)
        for raw in self._store.read():
            if normalize_code(raw["code"]) == wanted:
                return Coupon(id=raw["id"], code=wanted)
        return None
