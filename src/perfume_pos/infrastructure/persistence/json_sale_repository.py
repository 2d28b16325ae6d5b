"""JSON-file-backed implementation of SaleRepository (append-only)."""

from __future__ import annotations

from pathlib import Path

from perfume_pos.domain.exceptions import DomainException, PersistenceError
from perfume_pos.domain.model.sale import PaymentMethod, Sale, SaleLineItem
from perfume_pos.domain.model.value_objects import Money, Quantity
from perfume_pos.domain.repository.filters import DateRange
from perfume_pos.domain.repository.sale_repository import SaleRepository
from perfume_pos.infrastructure.persistence.json_store import JsonFile, next_id, parse_timestamp


class JsonSaleRepository(SaleRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    # --- SaleRepository interface ---------------------------------------------

    def next_id(self) -> int:
        return next_id(self._file.load())

    def get_by_id(self, sale_id: int) -> Sale | None:
        for raw in self._file.load():
            if raw["id"] == sale_id:
                return self._to_domain(raw)
        return None

    def list_all(self, period: DateRange | None = None) -> list[Sale]:
        sales = [self._to_domain(raw) for raw in self._file.load()]
        if period is not None:
            sales = [s for s in sales if period.contains(s.created_at)]
        return sales

    def append(self, sale: Sale) -> None:
        records = self._file.load()
        if any(raw["id"] == sale.id for raw in records):
            raise PersistenceError(f"Sale #{sale.id} already recorded")
        records.append(self._to_raw(sale))
        self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(sale: Sale) -> dict:
        return {
            "id": sale.id,
            "payment_method": sale.payment_method.value,
            "cashier_name": sale.cashier_name,
            "created_at": sale.created_at.isoformat(),
            "total_amount": sale.total_amount.to_wire(),
            "items": [
                {
                    "id": item.id,
                    "variant": item.variant_id,
                    "variant_label": item.variant_label,
                    "sku": item.sku,
                    "quantity": item.quantity.value,
                    "unit_price": item.unit_price.to_wire(),
                    "subtotal": item.subtotal.to_wire(),
                }
                for item in sale.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Sale:
        try:
            items = tuple(
                SaleLineItem(
                    id=i["id"],
                    variant_id=i["variant"],
                    variant_label=i.get("variant_label", ""),
                    sku=i.get("sku", ""),
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money.of(i["unit_price"]),
                )
                for i in raw["items"]
            )
            return Sale(
                id=raw["id"],
                items=items,
                payment_method=PaymentMethod(raw["payment_method"]),
                cashier_name=raw["cashier_name"],
                created_at=parse_timestamp(raw["created_at"]),
            )
        except (KeyError, TypeError, ValueError, DomainException) as exc:
            raise PersistenceError(f"Malformed sale record: {exc}") from exc
