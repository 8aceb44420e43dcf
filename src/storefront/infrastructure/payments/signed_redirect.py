"""Redirect payment gateway with MD5-signed parameter sets.

Outbound redirects and inbound notifications are signed over the same
canonical string, built by ``canonical_string``:

    keys sorted, ``key=<percent-encoded value>`` joined with ``&``,
    then ``&passphrase=<percent-encoded passphrase>`` if one is configured.

Values are encoded like JavaScript's ``encodeURIComponent``.  The
passphrase is part of the signed string only; it never appears in a URL.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Mapping
from urllib.parse import quote, urlencode

from storefront.domain.exceptions import SignatureMismatch, ValidationError
from storefront.domain.model.order import Order
from storefront.domain.model.payment import PAYMENT_PENDING, PaymentNotification, PaymentResult
from storefront.domain.service.payment_gateway import PaymentGateway
from storefront.infrastructure.settings import GatewaySettings

logger = logging.getLogger(__name__)

ORDER_ID_FIELD = "m_payment_id"
TRANSACTION_FIELD = "pf_payment_id"
STATUS_FIELD = "payment_status"
SIGNATURE_FIELD = "signature"

# Characters encodeURIComponent leaves alone besides alphanumerics.
_UNRESERVED = "-_.!~*'()"


def encode_value(value: object) -> str:
    return quote(str(value), safe=_UNRESERVED)


def canonical_string(params: Mapping[str, str], passphrase: str | None = None) -> str:
    joined = "&".join(f"{key}={encode_value(params[key])}" for key in sorted(params))
    if passphrase:
        joined += f"&passphrase={encode_value(passphrase)}"
    return joined


def sign(params: Mapping[str, str], passphrase: str | None = None) -> str:
    return hashlib.md5(canonical_string(params, passphrase).encode("utf-8")).hexdigest()


class SignedRedirectGateway(PaymentGateway):

    def __init__(self, settings: GatewaySettings) -> None:
        self._settings = settings

    def build_params(self, order: Order) -> dict[str, str]:
        s = self._settings
        return {
            "merchant_id": s.merchant_id,
            "merchant_key": s.merchant_key,
            "return_url": s.return_url,
            "cancel_url": s.cancel_url,
            "notify_url": s.notify_url,
            ORDER_ID_FIELD: str(order.id),
            "amount": f"{order.total_amount.amount:.2f}",
            "item_name": f"Order #{order.id}",
        }

    def build_redirect(self, order: Order) -> PaymentResult:
        params = self.build_params(order)
        params[SIGNATURE_FIELD] = sign(params, self._settings.passphrase)
        return PaymentResult(
            status=PAYMENT_PENDING,
            redirect_url=f"{self._settings.url}?{urlencode(params)}",
        )

    def verify(self, fields: Mapping[str, str]) -> PaymentNotification:
        data = dict(fields)
        provided = data.pop(SIGNATURE_FIELD, None)
        if not provided:
            raise SignatureMismatch()

        expected = sign(data, self._settings.passphrase)
        if not hmac.compare_digest(expected.encode(), provided.strip().lower().encode("utf-8")):
            raise SignatureMismatch()

        order_id = data.get(ORDER_ID_FIELD)
        if not order_id:
            raise ValidationError(f"Notification is missing {ORDER_ID_FIELD}")

        return PaymentNotification(
            order_id=order_id,
            transaction_id=data.get(TRANSACTION_FIELD),
            provider_status=data.get(STATUS_FIELD, ""),
            fields=data,
        )
