"""JSON-file-backed implementation of ReturnRepository."""

from __future__ import annotations

from pathlib import Path

from perfume_pos.domain.exceptions import (
    AlreadyReturnedError,
    DomainException,
    PersistenceError,
)
from perfume_pos.domain.model.returns import (
    ExchangeItem,
    OperationType,
    Return,
    ReturnItem,
    ReturnReason,
)
from perfume_pos.domain.model.sale import PaymentMethod
from perfume_pos.domain.model.value_objects import Money, Quantity, quantize
from perfume_pos.domain.repository.filters import DateRange
from perfume_pos.domain.repository.return_repository import ReturnRepository
from perfume_pos.infrastructure.persistence.json_store import JsonFile, next_id, parse_timestamp


class JsonReturnRepository(ReturnRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    # --- ReturnRepository interface -------------------------------------------

    def next_id(self) -> int:
        return next_id(self._file.load())

    def get_by_id(self, return_id: int) -> Return | None:
        for raw in self._file.load():
            if raw["id"] == return_id:
                return self._to_domain(raw)
        return None

    def list_all(self, period: DateRange | None = None) -> list[Return]:
        records = [self._to_domain(raw) for raw in self._file.load()]
        if period is not None:
            records = [r for r in records if period.contains(r.created_at)]
        return records

    def find_for_sale(self, sale_id: int) -> list[Return]:
        return [self._to_domain(raw) for raw in self._file.load() if raw["sale"] == sale_id]

    def append(self, record: Return) -> None:
        # Check and insert against the same loaded snapshot.
        records = self._file.load()
        if any(raw["sale"] == record.sale_id for raw in records):
            raise AlreadyReturnedError(record.sale_id)
        if any(raw["id"] == record.id for raw in records):
            raise PersistenceError(f"Return #{record.id} already recorded")
        records.append(self._to_raw(record))
        self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: Return) -> dict:
        return {
            "id": record.id,
            "sale": record.sale_id,
            "operation_type": record.operation_type.value,
            "reason": record.reason.value,
            "payment_method": record.payment_method.value,
            "cashier_name": record.cashier_name,
            "notes": record.notes,
            "created_at": record.created_at.isoformat(),
            "return_total": record.return_total.to_wire(),
            "exchange_total": record.exchange_total.to_wire(),
            "difference": str(quantize(record.difference)),
            "return_items": [
                {
                    "id": item.id,
                    "sale_item": item.sale_item_id,
                    "variant": item.variant_id,
                    "variant_label": item.variant_label,
                    "quantity": item.quantity.value,
                    "unit_price": item.unit_price.to_wire(),
                    "subtotal": item.subtotal.to_wire(),
                }
                for item in record.return_items
            ],
            "exchange_items": [
                {
                    "variant": item.variant_id,
                    "variant_label": item.variant_label,
                    "quantity": item.quantity.value,
                    "unit_price": item.unit_price.to_wire(),
                    "subtotal": item.subtotal.to_wire(),
                }
                for item in record.exchange_items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Return:
        try:
            return_items = tuple(
                ReturnItem(
                    id=i["id"],
                    sale_item_id=i["sale_item"],
                    variant_id=i["variant"],
                    variant_label=i.get("variant_label", ""),
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money.of(i["unit_price"]),
                )
                for i in raw["return_items"]
            )
            exchange_items = tuple(
                ExchangeItem(
                    variant_id=i["variant"],
                    variant_label=i.get("variant_label", ""),
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money.of(i["unit_price"]),
                )
                for i in raw.get("exchange_items", [])
            )
            return Return(
                id=raw["id"],
                sale_id=raw["sale"],
                return_items=return_items,
                operation_type=OperationType(raw["operation_type"]),
                reason=ReturnReason(raw["reason"]),
                payment_method=PaymentMethod(raw["payment_method"]),
                exchange_items=exchange_items,
                cashier_name=raw["cashier_name"],
                notes=raw.get("notes", ""),
                created_at=parse_timestamp(raw["created_at"]),
            )
        except (KeyError, TypeError, ValueError, DomainException) as exc:
            raise PersistenceError(f"Malformed return record: {exc}") from exc
