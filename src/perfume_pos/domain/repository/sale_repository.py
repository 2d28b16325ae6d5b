"""Abstract repository for the append-only Sale ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from perfume_pos.domain.model.sale import Sale
from perfume_pos.domain.repository.filters import DateRange


class SaleRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique, increasing sale ID."""

    @abstractmethod
    def get_by_id(self, sale_id: int) -> Sale | None:
        """Return a sale by its ID, or None if not found."""

    @abstractmethod
    def list_all(self, period: DateRange | None = None) -> list[Sale]:
        """Return sales in creation order, optionally within *period*."""

    @abstractmethod
    def append(self, sale: Sale) -> None:
        """Persist a new sale.  Existing sales are never rewritten."""
