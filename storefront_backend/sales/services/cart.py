# sales/services/cart.py

"""
CART AGGREGATE

Request-scoped, in-memory collection of (product, quantity) lines.
Never stored and never global: the checkout view builds one from the
submitted payload and hands it explicitly to the order writer.

Money rules:
- unit prices are Decimal copies of the catalog price at build time
- total() is an exact Decimal sum (no per-line rounding)
- display_total() is the only place rounding to 2dp happens
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterator

TWOPLACES = Decimal("0.01")
WHOLE_NUMBER_RE = re.compile(r"-?[0-9]+")


class CartError(Exception):
    """Base cart exception"""


class InvalidCartQuantity(CartError):
    pass


class CartLineNotFound(CartError):
    pass


def _to_int_qty(value) -> int:
    """
    Whole-unit quantities only. bool, NaN, fractions and non-numeric strings
    are rejected rather than clamped.
    """
    if isinstance(value, bool):
        raise InvalidCartQuantity("quantity must be a whole number")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if WHOLE_NUMBER_RE.fullmatch(s):
            return int(s)
        if not s.isascii():
            raise InvalidCartQuantity("quantity must be a whole number")
        value = s

    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidCartQuantity("quantity must be a whole number")

    if not d.is_finite() or d != d.to_integral_value():
        raise InvalidCartQuantity("quantity must be a whole number")

    return int(d)


@dataclass
class CartLine:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    weight_grams: int = 0
    grind_type: str = ""

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    def __init__(self):
        self._lines: dict[str, CartLine] = {}

    # -----------------------------
    # Mutations
    # -----------------------------
    def add(self, product) -> CartLine:
        """
        +1 if the product is already in the cart, else a new line at 1.
        Stock is not checked here.
        """
        key = str(product.id)
        line = self._lines.get(key)
        if line is not None:
            line.quantity += 1
            return line

        line = CartLine(
            product_id=key,
            name=product.name,
            unit_price=Decimal(str(product.price)),
            quantity=1,
            weight_grams=int(getattr(product, "weight_grams", 0) or 0),
        )
        self._lines[key] = line
        return line

    def set_quantity(self, product_id, quantity) -> None:
        qty = _to_int_qty(quantity)
        key = str(product_id)

        if qty <= 0:
            self._lines.pop(key, None)
            return

        line = self._lines.get(key)
        if line is None:
            raise CartLineNotFound(f"Product {key} is not in the cart")
        line.quantity = qty

    def set_grind_type(self, product_id, grind_type: str) -> None:
        line = self._lines.get(str(product_id))
        if line is None:
            raise CartLineNotFound(f"Product {product_id} is not in the cart")
        line.grind_type = grind_type or ""

    def remove(self, product_id) -> None:
        self._lines.pop(str(product_id), None)

    def clear(self) -> None:
        self._lines.clear()

    # -----------------------------
    # Reads
    # -----------------------------
    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), Decimal("0"))

    def display_total(self) -> Decimal:
        return self.total().quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    def total_weight_grams(self) -> int:
        return sum(line.weight_grams * line.quantity for line in self._lines.values())
