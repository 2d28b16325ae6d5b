"""Application services: sales history queries.

Covers the history screen (list + stats), the sale detail view, and the
first step of the return wizard (finding a sale to return against).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from perfume_pos.application.dto import ReturnDTO, SaleDTO
from perfume_pos.application.mappers import return_to_dto, sale_to_dto
from perfume_pos.domain.exceptions import SaleNotFoundError
from perfume_pos.domain.model.value_objects import Money, quantize
from perfume_pos.domain.repository.filters import DateRange
from perfume_pos.domain.repository.return_repository import ReturnRepository
from perfume_pos.domain.repository.sale_repository import SaleRepository


@dataclass(frozen=True)
class SalesStatsDTO:
    sale_count: int
    revenue: str
    items_sold: int
    average_sale: str


@dataclass(frozen=True)
class SalesHistoryDTO:
    sales: list[SaleDTO]
    stats: SalesStatsDTO


@dataclass(frozen=True)
class SaleDetailDTO:
    sale: SaleDTO
    returns: list[ReturnDTO]


class ListSalesHandler:

    def __init__(self, sale_repo: SaleRepository, return_repo: ReturnRepository) -> None:
        self._sale_repo = sale_repo
        self._return_repo = return_repo

    def handle(self, period: DateRange | None = None) -> SalesHistoryDTO:
        sales = self._sale_repo.list_all(period)
        returned = {r.sale_id for r in self._return_repo.list_all()}

        revenue = Money.total(s.total_amount for s in sales)
        average = revenue.amount / len(sales) if sales else Decimal("0")
        stats = SalesStatsDTO(
            sale_count=len(sales),
            revenue=revenue.to_wire(),
            items_sold=sum(s.item_count for s in sales),
            average_sale=str(quantize(average)),
        )
        return SalesHistoryDTO(
            sales=[sale_to_dto(s, has_return=s.id in returned) for s in sales],
            stats=stats,
        )


class ShowSaleHandler:

    def __init__(self, sale_repo: SaleRepository, return_repo: ReturnRepository) -> None:
        self._sale_repo = sale_repo
        self._return_repo = return_repo

    def handle(self, sale_id: int) -> SaleDetailDTO:
        sale = self._sale_repo.get_by_id(sale_id)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        returns = self._return_repo.find_for_sale(sale.id)
        return SaleDetailDTO(
            sale=sale_to_dto(sale, has_return=bool(returns)),
            returns=[return_to_dto(r) for r in returns],
        )


class ListReturnableSalesHandler:
    """Return wizard, step one: pick the sale to return against."""

    def __init__(self, sale_repo: SaleRepository, return_repo: ReturnRepository) -> None:
        self._sale_repo = sale_repo
        self._return_repo = return_repo

    def handle(self, search: str | None = None, include_returned: bool = False) -> list[SaleDTO]:
        """Match *search* against the sale number or the cashier name.

        Sales that already have a return cannot be returned again; they are
        left out unless *include_returned* is set (then flagged).
        """
        returned = {r.sale_id for r in self._return_repo.list_all()}
        needle = (search or "").strip().lower()

        result: list[SaleDTO] = []
        for sale in reversed(self._sale_repo.list_all()):
            if sale.id in returned and not include_returned:
                continue
            if needle and needle not in str(sale.id) and needle not in sale.cashier_name.lower():
                continue
            result.append(sale_to_dto(sale, has_return=sale.id in returned))
        return result
