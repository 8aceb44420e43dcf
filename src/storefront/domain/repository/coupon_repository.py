"""Abstract repository for the Coupon view."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return the coupon for a normalized (upper-case) code, or None."""
