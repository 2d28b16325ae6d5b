"""Application services: returns history queries."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from perfume_pos.application.dto import ReturnDTO
from perfume_pos.application.mappers import return_to_dto
from perfume_pos.domain.exceptions import EntityNotFoundError
from perfume_pos.domain.model.returns import OperationType
from perfume_pos.domain.model.value_objects import Money, quantize
from perfume_pos.domain.repository.filters import DateRange
from perfume_pos.domain.repository.return_repository import ReturnRepository


@dataclass(frozen=True)
class ReturnsStatsDTO:
    return_count: int
    total_refunded: str
    exchange_count: int
    net_difference: str


@dataclass(frozen=True)
class ReturnsHistoryDTO:
    returns: list[ReturnDTO]
    stats: ReturnsStatsDTO


class ListReturnsHandler:

    def __init__(self, return_repo: ReturnRepository) -> None:
        self._return_repo = return_repo

    def handle(self, period: DateRange | None = None) -> ReturnsHistoryDTO:
        records = self._return_repo.list_all(period)
        refunds = [r for r in records if r.operation_type is OperationType.REFUND]
        stats = ReturnsStatsDTO(
            return_count=len(records),
            total_refunded=Money.total(r.return_total for r in refunds).to_wire(),
            exchange_count=len(records) - len(refunds),
            net_difference=str(quantize(sum((r.difference for r in records), Decimal("0")))),
        )
        return ReturnsHistoryDTO(
            returns=[return_to_dto(r) for r in records],
            stats=stats,
        )


class ShowReturnHandler:

    def __init__(self, return_repo: ReturnRepository) -> None:
        self._return_repo = return_repo

    def handle(self, return_id: int) -> ReturnDTO:
        record = self._return_repo.get_by_id(return_id)
        if record is None:
            raise EntityNotFoundError(f"Return #{return_id} not found")
        return return_to_dto(record)
