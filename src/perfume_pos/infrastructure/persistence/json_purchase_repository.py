"""JSON-file-backed implementation of PurchaseRepository."""

from __future__ import annotations

from pathlib import Path

from perfume_pos.domain.exceptions import DomainException, PersistenceError
from perfume_pos.domain.model.purchase import Purchase, PurchaseItem
from perfume_pos.domain.model.value_objects import Money, Quantity
from perfume_pos.domain.repository.filters import DateRange
from perfume_pos.domain.repository.purchase_repository import PurchaseRepository
from perfume_pos.infrastructure.persistence.json_store import JsonFile, next_id, parse_timestamp


class JsonPurchaseRepository(PurchaseRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    def next_id(self) -> int:
        return next_id(self._file.load())

    def get_by_id(self, purchase_id: int) -> Purchase | None:
        for raw in self._file.load():
            if raw["id"] == purchase_id:
                return self._to_domain(raw)
        return None

    def list_all(self, period: DateRange | None = None) -> list[Purchase]:
        purchases = [self._to_domain(raw) for raw in self._file.load()]
        if period is not None:
            purchases = [p for p in purchases if period.contains(p.created_at)]
        return purchases

    def append(self, purchase: Purchase) -> None:
        records = self._file.load()
        records.append(
            {
                "id": purchase.id,
                "supplier_name": purchase.supplier_name,
                "notes": purchase.notes,
                "created_at": purchase.created_at.isoformat(),
                "total_amount": purchase.total_amount.to_wire(),
                "items": [
                    {
                        "variant": item.variant_id,
                        "variant_label": item.variant_label,
                        "quantity": item.quantity.value,
                        "unit_price": item.unit_cost.to_wire(),
                        "subtotal": item.subtotal.to_wire(),
                    }
                    for item in purchase.items
                ],
            }
        )
        self._file.persist(records)

    @staticmethod
    def _to_domain(raw: dict) -> Purchase:
        try:
            return Purchase(
                id=raw["id"],
                supplier_name=raw["supplier_name"],
                items=tuple(
                    PurchaseItem(
                        variant_id=i["variant"],
                        variant_label=i.get("variant_label", ""),
                        quantity=Quantity(i["quantity"]),
                        unit_cost=Money.of(i["unit_price"]),
                    )
                    for i in raw["items"]
                ),
                notes=raw.get("notes", ""),
                created_at=parse_timestamp(raw["created_at"]),
            )
        except (KeyError, TypeError, ValueError, DomainException) as exc:
            raise PersistenceError(f"Malformed purchase record: {exc}") from exc
