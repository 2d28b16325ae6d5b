"""Abstract repository for Return records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from perfume_pos.domain.model.returns import Return
from perfume_pos.domain.repository.filters import DateRange


class ReturnRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique return ID."""

    @abstractmethod
    def get_by_id(self, return_id: int) -> Return | None:
        """Return a return by its ID, or None if not found."""

    @abstractmethod
    def list_all(self, period: DateRange | None = None) -> list[Return]:
        """Return every return, optionally within *period*."""

    @abstractmethod
    def find_for_sale(self, sale_id: int) -> list[Return]:
        """Return the returns referencing *sale_id* (at most one)."""

    @abstractmethod
    def append(self, record: Return) -> None:
        """Persist a new return.

        Check-and-insert must be a single step: raise AlreadyReturnedError
        if a return for ``record.sale_id`` already exists.
        """
