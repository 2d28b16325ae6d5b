"""Application services: purchase history queries."""

from __future__ import annotations

from perfume_pos.application.dto import PurchaseDTO
from perfume_pos.application.mappers import purchase_to_dto
from perfume_pos.domain.exceptions import EntityNotFoundError
from perfume_pos.domain.repository.filters import DateRange
from perfume_pos.domain.repository.purchase_repository import PurchaseRepository


class ListPurchasesHandler:

    def __init__(self, purchase_repo: PurchaseRepository) -> None:
        self._purchase_repo = purchase_repo

    def handle(self, period: DateRange | None = None) -> list[PurchaseDTO]:
        return [purchase_to_dto(p) for p in self._purchase_repo.list_all(period)]

    def show(self, purchase_id: int) -> PurchaseDTO:
        purchase = self._purchase_repo.get_by_id(purchase_id)
        if purchase is None:
            raise EntityNotFoundError(f"Purchase #{purchase_id} not found")
        return purchase_to_dto(purchase)
