"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from wms.domain.exceptions import InvalidArgument

ZERO = Decimal("0")


@dataclass(frozen=True)
class Quantity:
    """A strictly positive quantity in the item's native unit.

    Uses Decimal so weight-based lines (e.g. 12.5 KG) are exact.
    Enforces the invariant that you cannot order zero or negative amounts.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise InvalidArgument(
                f"Quantity must be a Decimal, got {type(self.value).__name__}"
            )
        if not self.value.is_finite():
            raise InvalidArgument(f"Quantity must be finite, got {self.value}")
        if self.value <= ZERO:
            raise InvalidArgument("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | int | Decimal) -> Quantity:
        """Convenient factory that coerces to Decimal safely."""
        if isinstance(amount, float):
            amount = str(amount)
        try:
            return Quantity(Decimal(amount))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidArgument(f"Invalid quantity: {amount!r}") from exc


def to_decimal(raw: object, field_name: str) -> Decimal:
    """Coerce a stored non-negative magnitude (int, str, Decimal) to Decimal."""
    if raw is None:
        return ZERO
    if isinstance(raw, float):
        raw = str(raw)
    try:
        value = Decimal(raw)  # type: ignore[arg-type]
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidArgument(f"Invalid {field_name}: {raw!r}") from exc
    if not value.is_finite() or value < ZERO:
        raise InvalidArgument(f"{field_name} cannot be negative, got {value}")
    return value
