"""Unit tests for the CouponValidator domain service."""

import pytest

from storefront.domain.exceptions import CouponInvalid, CouponRequiresAuth
from storefront.domain.model.coupon import Coupon
from storefront.domain.service.coupon_validator import CouponValidator
from tests.fakes import FakeCouponRepository


def _validator() -> CouponValidator:
    return CouponValidator(FakeCouponRepository([Coupon(id="c1", code="SAVE5")]))


class TestCouponValidator:

    def test_no_code_means_no_coupon(self):
        assert _validator().validate(None, user_id=None) is None
        assert _validator().validate("  ", user_id="u1") is None

    def test_guest_cannot_use_coupon(self):
        with pytest.raises(CouponRequiresAuth):
            _validator().validate("SAVE5", user_id=None)

    def test_unknown_code_rejected(self):
        with pytest.raises(CouponInvalid, match="Invalid or expired coupon"):
            _validator().validate("BOGUS", user_id="u1")

    def test_code_matched_case_insensitively(self):
        coupon = _validator().validate(" save5 ", user_id="u1")
        assert coupon.id == "c1"
