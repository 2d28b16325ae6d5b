"""JSON-file-backed implementation of CatalogRepository.

The file holds ``{"categories": [...], "perfumes": [...], "variants": [...]}``
using the backend's field names (``price_mad``, ``stock_qty`` ...).
Derived stock flags are written alongside ``stock_qty`` for readers of
the file but are always recomputed when loading.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from perfume_pos.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PersistenceError,
    StockConflictError,
)
from perfume_pos.domain.model.catalog import Category, Gender, Perfume, Variant
from perfume_pos.domain.model.value_objects import Money
from perfume_pos.domain.repository.catalog_repository import CatalogRepository
from perfume_pos.domain.repository.filters import VariantFilter
from perfume_pos.infrastructure.persistence.json_store import JsonFile, parse_timestamp

_EMPTY = {"categories": [], "perfumes": [], "variants": []}


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, _EMPTY)

    # --- CatalogRepository interface ------------------------------------------

    def list_categories(self) -> list[Category]:
        return [self._category(raw) for raw in self._section("categories")]

    def get_perfume(self, perfume_id: int) -> Perfume | None:
        for raw in self._section("perfumes"):
            if raw["id"] == perfume_id:
                return self._perfume(raw)
        return None

    def list_perfumes(
        self, category_id: int | None = None, search: str | None = None
    ) -> list[Perfume]:
        perfumes = [self._perfume(raw) for raw in self._section("perfumes")]
        if category_id is not None:
            perfumes = [p for p in perfumes if p.category_id == category_id]
        if search:
            needle = search.strip().lower()
            perfumes = [p for p in perfumes if needle in p.name.lower()]
        return perfumes

    def get_variant(self, variant_id: int) -> Variant | None:
        for raw in self._section("variants"):
            if raw["id"] == variant_id:
                return self._variant(raw)
        return None

    def list_variants(self, variant_filter: VariantFilter | None = None) -> list[Variant]:
        variants = [self._variant(raw) for raw in self._section("variants")]
        if variant_filter is None:
            return variants
        categories = {p.id: p.category_id for p in self.list_perfumes()}
        return [
            v for v in variants
            if variant_filter.matches(v, categories.get(v.perfume_id))
        ]

    def write_variant_stock(self, variant: Variant, expected_qty: int) -> None:
        data = self._file.load()
        for raw in data.get("variants", []):
            if raw["id"] != variant.id:
                continue
            if raw["stock_qty"] != expected_qty:
                raise StockConflictError(
                    f"Stock of {variant.label} changed meanwhile "
                    f"(expected {expected_qty}, found {raw['stock_qty']})"
                )
            raw["stock_qty"] = variant.stock_qty
            raw["is_in_stock"] = variant.is_in_stock
            raw["is_low_stock"] = variant.is_low_stock
            raw["updated_at"] = variant.updated_at.isoformat()
            self._file.persist(data)
            return
        raise EntityNotFoundError(f"Variant #{variant.id} not found")

    # --- Bulk import ----------------------------------------------------------

    def replace_all(self, data: dict) -> int:
        """Replace the whole catalog after checking every record parses."""
        try:
            for raw in data.get("categories", []):
                self._category(raw)
            for raw in data.get("perfumes", []):
                self._perfume(raw)
            variants = [self._variant(raw) for raw in data.get("variants", [])]
        except AttributeError as exc:
            raise PersistenceError(f"Malformed catalog: {exc}") from exc
        self._file.persist({
            "categories": data.get("categories", []),
            "perfumes": data.get("perfumes", []),
            "variants": [self._variant_to_raw(v) for v in variants],
        })
        return len(variants)

    # --- Serialization --------------------------------------------------------

    def _section(self, name: str) -> list[dict]:
        data = self._file.load()
        if not isinstance(data, dict):
            raise PersistenceError(f"Malformed catalog file {self._file.path.name}")
        return data.get(name, [])

    @staticmethod
    def _category(raw: dict) -> Category:
        try:
            return Category(
                id=raw["id"],
                name=raw["name"],
                slug=raw.get("slug", ""),
                description=raw.get("description", ""),
                is_active=raw.get("is_active", True),
            )
        except (KeyError, TypeError) as exc:
            raise PersistenceError(f"Malformed category record: {exc}") from exc

    @staticmethod
    def _perfume(raw: dict) -> Perfume:
        try:
            return Perfume(
                id=raw["id"],
                name=raw["name"],
                slug=raw.get("slug", ""),
                category_id=raw["category"],
                gender=Gender(raw.get("gender", "unisex")),
                description=raw.get("description", ""),
                is_active=raw.get("is_active", True),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed perfume record: {exc}") from exc

    @staticmethod
    def _variant(raw: dict) -> Variant:
        try:
            updated = raw.get("updated_at")
            return Variant(
                id=raw["id"],
                perfume_id=raw["perfume"],
                perfume_name=raw["perfume_name"],
                size_ml=raw["size_ml"],
                sku=raw["sku"],
                barcode=raw.get("barcode", ""),
                price=Money.of(raw["price_mad"]),
                stock_qty=raw["stock_qty"],
                low_stock_threshold=raw.get("low_stock_threshold", 5),
                is_active=raw.get("is_active", True),
                updated_at=parse_timestamp(updated) if updated else datetime.now(timezone.utc),
            )
        except (KeyError, TypeError, ValueError, DomainException) as exc:
            raise PersistenceError(f"Malformed variant record: {exc}") from exc

    @staticmethod
    def _variant_to_raw(variant: Variant) -> dict:
        return {
            "id": variant.id,
            "perfume": variant.perfume_id,
            "perfume_name": variant.perfume_name,
            "size_ml": variant.size_ml,
            "sku": variant.sku,
            "barcode": variant.barcode,
            "price_mad": variant.price.to_wire(),
            "stock_qty": variant.stock_qty,
            "low_stock_threshold": variant.low_stock_threshold,
            "is_active": variant.is_active,
            "is_in_stock": variant.is_in_stock,
            "is_low_stock": variant.is_low_stock,
            "updated_at": variant.updated_at.isoformat(),
        }
