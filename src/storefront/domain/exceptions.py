"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly.  Each class carries a
stable ``kind`` string that adapters expose to callers.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "domain_error"


class ValidationError(DomainException):
    """Missing or malformed input, or a violated invariant."""

    kind = "validation_error"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "not_found"


class OrderNotFound(EntityNotFoundError):

    kind = "order_not_found"

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class ProductNotFound(EntityNotFoundError):

    kind = "product_not_found"

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class InsufficientStock(DomainException):
    """A conditional stock decrement was refused."""

    kind = "insufficient_stock"

    def __init__(self, product_id: str, available: int, requested: int) -> None:
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id} "
            f"(requested {requested}, available {available})"
        )


class AmountMismatch(DomainException):
    """Client-declared amounts disagree with the server-side computation."""

    kind = "amount_mismatch"

    def __init__(self, field: str, declared, expected) -> None:
        self.field = field
        self.declared = declared
        self.expected = expected
        super().__init__(
            f"Invalid {field} calculation (declared {declared}, expected {expected})"
        )


class CouponInvalid(DomainException):

    kind = "coupon_invalid"


class CouponRequiresAuth(DomainException):

    kind = "coupon_requires_auth"

    def __init__(self) -> None:
        super().__init__("Authentication required for coupon use")


class Unauthorized(DomainException):

    kind = "unauthorized"


class Forbidden(DomainException):

    kind = "forbidden"


class SignatureMismatch(DomainException):
    """A gateway notification failed signature verification.

    The message is deliberately generic; it never says which field differed.
    """

    kind = "signature_mismatch"

    def __init__(self) -> None:
        super().__init__("Invalid signature")


class InvalidStatus(DomainException):

    kind = "invalid_status"
