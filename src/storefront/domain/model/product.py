"""Product view.

The catalog itself belongs to a separate collaborator.  The fulfillment
engine only reads a product's price and mutates its stock counter.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


@dataclass
class Product:
    """A product as seen by the fulfillment engine.

    Invariant: ``stock`` is never negative.  Stock is decremented only via
    the repository's conditional update, never by mutating a loaded copy
    and writing it back.
    """

    id: str
    name: str
    price: Money
    stock: int = 0
    image: str | None = None

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(
                f"Stock for {self.name} cannot be negative, got {self.stock}"
            )
