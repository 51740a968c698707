# phenofarm/services/inventory.py
"""Add-to-cart stock checks.

These checks are advisory feedback for the buyer. Stock is decremented and
re-validated authoritatively inside the checkout / order-entry transaction.
"""
from phenofarm.utils.errors import InventoryError


def remaining(current_qty_in_cart: int, inventory_qty: int) -> int:
    return max(inventory_qty - current_qty_in_cart, 0)


def can_add(current_qty_in_cart: int, requested_qty: int, inventory_qty: int) -> bool:
    if requested_qty < 1:
        return False
    return current_qty_in_cart + requested_qty <= inventory_qty


def clamp_quantity(quantity: int, max_qty: int) -> int:
    """Stepper semantics: keep quantity within [1, max_qty]."""
    return max(1, min(quantity, max_qty))


def check_new_item(requested_qty: int, inventory_qty: int) -> None:
    if requested_qty < 1 or requested_qty > inventory_qty:
        raise InventoryError(f"Please select quantity between 1 and {inventory_qty}")


def check_add(current_qty_in_cart: int, requested_qty: int, inventory_qty: int) -> None:
    if not can_add(current_qty_in_cart, requested_qty, inventory_qty):
        raise InventoryError(
            f"Cannot add {requested_qty} more. "
            f"Only {remaining(current_qty_in_cart, inventory_qty)} available."
        )
