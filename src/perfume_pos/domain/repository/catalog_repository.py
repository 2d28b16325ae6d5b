"""Abstract repository for the catalog (categories, perfumes, variants).

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (JSON file, REST backend,
in-memory) live elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from perfume_pos.domain.model.catalog import Category, Perfume, Variant
from perfume_pos.domain.repository.filters import VariantFilter


class CatalogRepository(ABC):

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """Return every category."""

    @abstractmethod
    def get_perfume(self, perfume_id: int) -> Perfume | None:
        """Return a perfume by its ID, or None."""

    @abstractmethod
    def list_perfumes(
        self, category_id: int | None = None, search: str | None = None
    ) -> list[Perfume]:
        """Return perfumes, optionally by category and name substring."""

    @abstractmethod
    def get_variant(self, variant_id: int) -> Variant | None:
        """Return the current state of a variant, or None."""

    @abstractmethod
    def list_variants(self, variant_filter: VariantFilter | None = None) -> list[Variant]:
        """Return variants matching *variant_filter* (all when None)."""

    @abstractmethod
    def write_variant_stock(self, variant: Variant, expected_qty: int) -> None:
        """Persist ``variant.stock_qty`` (and its derived flags).

        The write is conditional: implementations must raise
        StockConflictError when the stored quantity is no longer
        *expected_qty*, so two terminals can never jointly overdraw.
        """
