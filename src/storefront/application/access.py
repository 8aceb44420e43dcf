"""Ownership and role checks shared by the use cases."""

from __future__ import annotations

from storefront.application.dto import Requester
from storefront.domain.exceptions import Forbidden, Unauthorized


def require_authenticated(requester: Requester | None) -> Requester:
    if requester is None:
        raise Unauthorized("Authentication required")
    return requester


def require_admin(requester: Requester | None) -> Requester:
    requester = require_authenticated(requester)
    if not requester.is_admin:
        raise Forbidden("Admin access required")
    return requester
