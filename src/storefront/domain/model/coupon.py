"""Coupon view.

Applicability rules beyond existence belong to the coupon collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class Coupon:
    id: str
    code: str
