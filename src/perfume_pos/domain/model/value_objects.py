"""Money and quantity value objects.

Both are frozen and checked on construction, so an invalid amount or
count never reaches the aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from perfume_pos.domain.exceptions import ValidationError

CURRENCY = "MAD"
CENTS = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    """Round to two decimal places.  Only for display and persistence."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_signed(amount: Decimal) -> str:
    """Render a signed amount with an explicit sign, e.g. ``+20.00 MAD``."""
    sign = "+" if amount > 0 else ""
    return f"{sign}{quantize(amount)} {CURRENCY}"


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount.

    Uses Decimal to avoid floating-point rounding errors.  Arithmetic is
    exact; rounding to cents happens only in ``to_wire()`` and ``__str__``.
    """

    amount: Decimal
    currency: str = CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money needs a Decimal amount, not {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Amount cannot be negative: {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Money scales by whole numbers only, not {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def difference(self, other: Money) -> Decimal:
        """Signed ``self - other``; may be negative, so it is not Money."""
        self._check_currency(other)
        return self.amount - other.amount

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount <= other.amount

    # --- Display / wire -------------------------------------------------------

    def to_wire(self) -> str:
        """Fixed-point decimal string, e.g. ``"149.99"``."""
        return str(quantize(self.amount))

    def __str__(self) -> str:
        return f"{quantize(self.amount)} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} and {other.currency} amounts"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely.

        Floats are refused: a float has already lost the exact value.
        """
        if isinstance(amount, float):
            raise ValidationError(f"Invalid money amount: {amount!r} (use a string)")
        try:
            return Money(Decimal(str(amount).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def total(amounts) -> Money:
        result = Money.zero()
        for amount in amounts:
            result = result + amount
        return result


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, not {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError(f"Quantity must be positive, got {self.value}")

    def __str__(self) -> str:
        return str(self.value)


def parse_choice(enum_cls, raw, what: str):
    """Parse *raw* into a member of *enum_cls*, rejecting unknown values."""
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {what} {raw!r} (expected one of: {allowed})"
        ) from exc
