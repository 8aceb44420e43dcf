"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import ProductNotFound
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.json_store import JsonFileStore


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._store = JsonFileStore(file_path, lock_timeout)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._store.read():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def save(self, product: Product) -> None:
        with self._store.transaction() as records:
            for i, raw in enumerate(records):
                if raw["id"] == product.id:
                    records[i] = self._to_raw(product)
                    break
            else:
                records.append(self._to_raw(product))

    def decrement_stock(self, product_id: str, quantity: int) -> Product | None:
        with self._store.transaction() as records:
            raw = self._find(records, product_id)
            if raw["stock"] < quantity:
                return None
            raw["stock"] -= quantity
            return self._to_domain(raw)

    def increment_stock(self, product_id: str, quantity: int) -> None:
        with self._store.transaction() as records:
            raw = self._find(records, product_id)
            raw["stock"] += quantity

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _find(records: list[dict], product_id: str) -> dict:
        for raw in records:
            if raw["id"] == product_id:
                return raw
        raise ProductNotFound(product_id)

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "stock": product.stock,
            "image": product.image,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"])),
            stock=raw.get("stock", 0),
            image=raw.get("image"),
        )
