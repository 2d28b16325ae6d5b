"""Application service: Browse Catalog use case (query)."""

from __future__ import annotations

from dataclasses import replace

from perfume_pos.application.dto import VariantDTO
from perfume_pos.application.mappers import variant_to_dto
from perfume_pos.domain.model.catalog import Category, Perfume
from perfume_pos.domain.repository.catalog_repository import CatalogRepository
from perfume_pos.domain.repository.filters import SELLABLE, VariantFilter


class BrowseCatalogHandler:

    def __init__(self, catalog_repo: CatalogRepository) -> None:
        self._catalog_repo = catalog_repo

    def categories(self) -> list[Category]:
        return self._catalog_repo.list_categories()

    def perfumes(
        self, category_id: int | None = None, search: str | None = None
    ) -> list[Perfume]:
        return self._catalog_repo.list_perfumes(category_id=category_id, search=search)

    def variants(self, variant_filter: VariantFilter | None = None) -> list[VariantDTO]:
        return [variant_to_dto(v) for v in self._catalog_repo.list_variants(variant_filter)]

    def sellable(
        self, search: str | None = None, category_id: int | None = None
    ) -> list[VariantDTO]:
        """What the POS screen offers: active variants with stock left."""
        return self.variants(replace(SELLABLE, search=search, category_id=category_id))
