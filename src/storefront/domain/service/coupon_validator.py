"""Domain service: Coupon Validator."""

from __future__ import annotations

from storefront.domain.exceptions import CouponInvalid, CouponRequiresAuth
from storefront.domain.model.coupon import Coupon, normalize_code
from storefront.domain.repository.coupon_repository import CouponRepository


class CouponValidator:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def validate(self, code: str | None, user_id: str | None) -> Coupon | None:
        """Resolve *code* to a coupon the order can reference.

        Only existence is checked here; the discount amount itself is
        verified by the AmountReconciler.
        """
        if code is None or not code.strip():
            return None
        if user_id is None:
            raise CouponRequiresAuth()

        coupon = self._coupon_repo.get_by_code(normalize_code(code))
        if coupon is None:
            raise CouponInvalid("Invalid or expired coupon")
        return coupon
