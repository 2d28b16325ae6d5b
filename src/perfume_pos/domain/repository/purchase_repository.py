"""Abstract repository for supplier purchases."""

from __future__ import annotations

from abc import ABC, abstractmethod

from perfume_pos.domain.model.purchase import Purchase
from perfume_pos.domain.repository.filters import DateRange


class PurchaseRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique purchase ID."""

    @abstractmethod
    def get_by_id(self, purchase_id: int) -> Purchase | None:
        """Return a purchase by its ID, or None."""

    @abstractmethod
    def list_all(self, period: DateRange | None = None) -> list[Purchase]:
        """Return purchases, optionally within *period*."""

    @abstractmethod
    def append(self, purchase: Purchase) -> None:
        """Persist a new purchase."""
