"""Composition root: wires the JSON repositories and the cart session from Settings.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from perfume_pos.application.cart_session import CartSessionManager
from perfume_pos.infrastructure.config import Settings
from perfume_pos.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)
from perfume_pos.infrastructure.persistence.json_purchase_repository import (
    JsonPurchaseRepository,
)
from perfume_pos.infrastructure.persistence.json_return_repository import (
    JsonReturnRepository,
)
from perfume_pos.infrastructure.persistence.json_sale_repository import (
    JsonSaleRepository,
)


def catalog_repository(settings: Settings) -> JsonCatalogRepository:
    return JsonCatalogRepository(settings.data_dir / "catalog.json")


def sale_repository(settings: Settings) -> JsonSaleRepository:
    return JsonSaleRepository(settings.data_dir / "sales.json")


def return_repository(settings: Settings) -> JsonReturnRepository:
    return JsonReturnRepository(settings.data_dir / "returns.json")


def purchase_repository(settings: Settings) -> JsonPurchaseRepository:
    return JsonPurchaseRepository(settings.data_dir / "purchases.json")


def cart_session(settings: Settings) -> CartSessionManager:
    return CartSessionManager(max_carts=settings.max_carts)
