"""Cart Session Manager: the open tills of one POS session.

Carts live only in memory, keyed by a short-lived integer ID, and are
separate from the durable sale/return stores.  Checkout turns a cart
into a sale request; once the sale commits the cart is discarded.
"""

from __future__ import annotations

import itertools
import logging
import string

from perfume_pos.application.create_sale import CreateSaleHandler
from perfume_pos.application.dto import SaleDTO, SaleItemSpec
from perfume_pos.domain.exceptions import (
    EmptyCartError,
    EntityNotFoundError,
    LastCartError,
    TooManyCartsError,
)
from perfume_pos.domain.model.cart import AddOutcome, Cart
from perfume_pos.domain.model.catalog import Variant
from perfume_pos.domain.model.sale import PaymentMethod
from perfume_pos.domain.model.value_objects import Money

logger = logging.getLogger(__name__)

DEFAULT_MAX_CARTS = 3


class CartSessionManager:

    def __init__(self, max_carts: int = DEFAULT_MAX_CARTS) -> None:
        self._max_carts = max_carts
        self._carts: dict[int, Cart] = {}
        self._ids = itertools.count(1)
        self.create_cart()

    @property
    def carts(self) -> list[Cart]:
        return list(self._carts.values())

    def get(self, cart_id: int) -> Cart:
        cart = self._carts.get(cart_id)
        if cart is None:
            raise EntityNotFoundError(f"Cart #{cart_id} not found")
        return cart

    def create_cart(self, label: str | None = None) -> Cart:
        if len(self._carts) >= self._max_carts:
            raise TooManyCartsError(self._max_carts)
        cart = Cart(id=next(self._ids), name=label or self._next_free_name())
        self._carts[cart.id] = cart
        return cart

    def remove_cart(self, cart_id: int) -> None:
        self.get(cart_id)
        if len(self._carts) == 1:
            raise LastCartError()
        del self._carts[cart_id]

    def add_item(self, cart_id: int, variant: Variant) -> AddOutcome:
        """Add one unit of *variant*.

        Running out of stock is not an error: the cart is left unchanged
        and ``AddOutcome.OUT_OF_STOCK`` tells the front end to warn.
        """
        outcome = self.get(cart_id).add(variant)
        if outcome is AddOutcome.OUT_OF_STOCK:
            logger.debug("Cart #%d: no more stock for %s", cart_id, variant.label)
        return outcome

    def set_quantity(self, cart_id: int, variant_id: int, quantity: int) -> int:
        return self.get(cart_id).set_quantity(variant_id, quantity)

    def remove_item(self, cart_id: int, variant_id: int) -> None:
        self.get(cart_id).remove(variant_id)

    def total(self, cart_id: int) -> Money:
        return self.get(cart_id).total

    def to_sale_request(self, cart_id: int) -> list[SaleItemSpec]:
        cart = self.get(cart_id)
        if cart.is_empty:
            raise EmptyCartError()
        return [
            SaleItemSpec(variant_id=line.variant.id, quantity=line.quantity)
            for line in cart.lines.values()
        ]

    def discard(self, cart_id: int) -> Cart | None:
        """Drop a checked-out cart.  Returns the fresh cart opened if it was the last one."""
        self.get(cart_id)
        del self._carts[cart_id]
        if not self._carts:
            return self.create_cart()
        return None

    def _next_free_name(self) -> str:
        used = {cart.name for cart in self._carts.values()}
        for letter in string.ascii_uppercase:
            if letter not in used:
                return letter
        return str(len(self._carts) + 1)


class CheckoutCartHandler:

    def __init__(self, session: CartSessionManager, create_sale: CreateSaleHandler) -> None:
        self._session = session
        self._create_sale = create_sale

    def handle(
        self,
        cart_id: int,
        payment_method: str | PaymentMethod,
        cashier_name: str | None = None,
    ) -> SaleDTO:
        """Commit the cart as a sale; the cart survives if the sale fails."""
        specs = self._session.to_sale_request(cart_id)
        sale = self._create_sale.handle(specs, payment_method, cashier_name)
        self._session.discard(cart_id)
        return sale
