"""Application service: Show Stock use case (query).

Also builds restock requests: a summary of what the operator wants to
reorder.  Nothing is persisted and stock is left untouched.
"""

from __future__ import annotations

from dataclasses import dataclass

from perfume_pos.application.dto import VariantDTO
from perfume_pos.application.mappers import variant_to_dto
from perfume_pos.domain.exceptions import EntityNotFoundError, ValidationError
from perfume_pos.domain.model.value_objects import Money, Quantity
from perfume_pos.domain.repository.catalog_repository import CatalogRepository
from perfume_pos.domain.repository.filters import VariantFilter


@dataclass(frozen=True)
class StockStatsDTO:
    total_variants: int
    low_stock: int
    out_of_stock: int
    total_value: str


@dataclass(frozen=True)
class StockReportDTO:
    lines: list[VariantDTO]
    stats: StockStatsDTO


@dataclass(frozen=True)
class RestockLineDTO:
    variant_id: int
    variant_label: str
    current_stock: int
    quantity: int


@dataclass(frozen=True)
class RestockRequestDTO:
    lines: list[RestockLineDTO]
    total_units: int


class ShowStockHandler:

    def __init__(self, catalog_repo: CatalogRepository) -> None:
        self._catalog_repo = catalog_repo

    def handle(self, variant_filter: VariantFilter | None = None) -> StockReportDTO:
        """List variants matching the filter.

        Stats always cover the whole catalog, like the stock screen header.
        """
        everything = self._catalog_repo.list_variants()
        shown = (
            self._catalog_repo.list_variants(variant_filter)
            if variant_filter is not None
            else everything
        )
        stats = StockStatsDTO(
            total_variants=len(everything),
            low_stock=sum(1 for v in everything if v.is_low_stock),
            out_of_stock=sum(1 for v in everything if v.stock_qty == 0),
            total_value=Money.total(v.price * v.stock_qty for v in everything).to_wire(),
        )
        return StockReportDTO(lines=[variant_to_dto(v) for v in shown], stats=stats)

    def restock_request(self, quantities: dict[int, int]) -> RestockRequestDTO:
        if not quantities:
            raise ValidationError("Select at least one variant to reorder")
        lines: list[RestockLineDTO] = []
        for variant_id, quantity in quantities.items():
            Quantity(quantity)
            variant = self._catalog_repo.get_variant(variant_id)
            if variant is None:
                raise EntityNotFoundError(f"Variant #{variant_id} not found")
            lines.append(
                RestockLineDTO(
                    variant_id=variant.id,
                    variant_label=variant.label,
                    current_stock=variant.stock_qty,
                    quantity=quantity,
                )
            )
        return RestockRequestDTO(lines=lines, total_units=sum(line.quantity for line in lines))
