# phenofarm/services/pricing.py
"""Order pricing: subtotal, tax, shipping and grand total in integer cents.

The tax rate is always supplied by the caller. The catalog cart and the
order entry points use different rates (see config.Settings).
"""
from dataclasses import dataclass
from typing import Iterable

from phenofarm.utils.errors import ValidationError
from phenofarm.utils.money import Number, percent_of


@dataclass(frozen=True)
class LineItem:
    quantity: int
    unit_price_cents: int

    @property
    def total_cents(self) -> int:
        return self.quantity * self.unit_price_cents


@dataclass(frozen=True)
class Totals:
    subtotal: int
    tax: int
    shipping: int
    total: int


def line_total(item) -> int:
    return item.quantity * item.unit_price_cents


def subtotal_of(items: Iterable) -> int:
    # Integer sum, so the order of items never changes the result
    return sum(line_total(item) for item in items)


def compute_totals(items: Iterable, shipping_fee_cents: int = 0, tax_rate: Number = 0) -> Totals:
    """Totals for any items exposing ``quantity`` and ``unit_price_cents``."""
    if shipping_fee_cents < 0:
        raise ValidationError("Shipping fee cannot be negative", field="shipping_fee")
    if float(tax_rate) < 0:
        raise ValidationError("Tax rate cannot be negative", field="tax_rate")

    subtotal = subtotal_of(items)
    tax = percent_of(subtotal, tax_rate)
    return Totals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping_fee_cents,
        total=subtotal + tax + shipping_fee_cents,
    )


def recompute_order(order) -> None:
    """Refresh line totals, subtotal and grand total after an order edit.

    The tax amount is whatever the order currently carries: the grower edit
    form enters tax as an amount, not a rate.
    """
    for item in order.items:
        item.total_price_cents = line_total(item)
    order.subtotal_cents = subtotal_of(order.items)
    order.total_amount_cents = order.subtotal_cents + (order.tax_cents or 0) + (order.shipping_fee_cents or 0)
