# phenofarm/services/cart_store.py
"""Dispensary shopping cart kept in a single durable storage slot.

Every mutation recomputes the totals, writes the whole cart back to the
slot and notifies subscribers (badge counters and the like).
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Callable, List, Optional

from phenofarm.services import inventory
from phenofarm.services.lab_results import resolve_strain_name, resolve_thc
from phenofarm.services.pricing import compute_totals
from phenofarm.utils.errors import NotFoundError
from phenofarm.utils.money import to_cents, to_float
from phenofarm.utils.storage import KeyValueStorage, load_json, save_json

logger = logging.getLogger(__name__)

CART_KEY = "phenofarm-cart"
CART_UPDATED = "cart-updated"

Listener = Callable[[str, "Cart"], None]


@dataclass
class CartItem:
    product_id: int
    name: str
    grower_id: int
    grower_name: str
    unit_price_cents: int
    quantity: int
    max_qty: int
    strain: Optional[str] = None
    unit: Optional[str] = None
    thc: Optional[float] = None

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_json(self) -> dict:
        data = asdict(self)
        data["unit_price"] = to_float(data.pop("unit_price_cents"))
        return data

    @classmethod
    def from_json(cls, data: dict) -> "CartItem":
        quantity, max_qty = int(data["quantity"]), int(data["max_qty"])
        if not 1 <= quantity <= max_qty:
            raise ValueError(f"quantity {quantity} outside 1..{max_qty}")
        return cls(
            product_id=int(data["product_id"]),
            name=str(data["name"]),
            grower_id=int(data["grower_id"]),
            grower_name=str(data.get("grower_name") or ""),
            unit_price_cents=to_cents(data["unit_price"]),
            quantity=quantity,
            max_qty=max_qty,
            strain=data.get("strain"),
            unit=data.get("unit"),
            thc=data.get("thc"),
        )


@dataclass
class Cart:
    items: List[CartItem] = field(default_factory=list)
    subtotal: int = 0
    tax: int = 0
    total: int = 0

    def find(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def to_json(self) -> dict:
        return {
            "items": [item.to_json() for item in self.items],
            "subtotal": to_float(self.subtotal),
            "tax": to_float(self.tax),
            "total": to_float(self.total),
        }


def _parse_cart(raw) -> Cart:
    if not isinstance(raw, dict) or not isinstance(raw.get("items", []), list):
        logger.warning("Stored cart has an unexpected shape, starting empty")
        return Cart()
    try:
        items = [CartItem.from_json(entry) for entry in raw.get("items", [])]
    except (KeyError, TypeError, ValueError, ArithmeticError):
        logger.warning("Stored cart has malformed items, starting empty")
        return Cart()
    return Cart(items=items)


class CartStore:
    def __init__(self, storage: KeyValueStorage, tax_rate: float, key: str = CART_KEY):
        self.storage = storage
        self.tax_rate = tax_rate
        self.key = key
        self._cart: Optional[Cart] = None
        self._listeners: List[Listener] = []

    @property
    def cart(self) -> Cart:
        if self._cart is None:
            self._cart = _parse_cart(load_json(self.storage, self.key, {"items": []}))
            # Totals are derived, never trusted from storage
            self._recompute()
        return self._cart

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def item_count(self) -> int:
        return sum(item.quantity for item in self.cart.items)

    # ---- mutations ----

    def add_item(self, product, quantity: int, grower_id: Optional[int] = None,
                 grower_name: Optional[str] = None) -> Cart:
        cart = self.cart
        inventory.check_new_item(quantity, product.inventory_qty)

        existing = cart.find(product.id)
        if existing:
            inventory.check_add(existing.quantity, quantity, product.inventory_qty)
            existing.quantity += quantity
            existing.max_qty = product.inventory_qty
        else:
            grower = getattr(product, "grower", None)
            cart.items.append(CartItem(
                product_id=product.id,
                name=product.name,
                grower_id=grower_id if grower_id is not None else product.grower_id,
                grower_name=grower_name or (grower.business_name if grower is not None else ""),
                unit_price_cents=product.price_cents,
                quantity=quantity,
                max_qty=product.inventory_qty,
                strain=resolve_strain_name(product),
                unit=product.unit,
                thc=resolve_thc(product),
            ))
        return self._commit()

    def remove_item(self, product_id: int) -> Cart:
        item = self._require(product_id)
        self.cart.items.remove(item)
        return self._commit()

    def set_quantity(self, product_id: int, quantity: int) -> Cart:
        item = self._require(product_id)
        item.quantity = inventory.clamp_quantity(quantity, item.max_qty)
        return self._commit()

    def step_quantity(self, product_id: int, delta: int) -> Cart:
        item = self._require(product_id)
        new_qty = item.quantity + delta
        # Steps leaving [1, max_qty] are ignored, not clamped
        if 1 <= new_qty <= item.max_qty:
            item.quantity = new_qty
        return self._commit()

    def clear(self) -> Cart:
        self._cart = Cart()
        return self._commit()

    # ---- internals ----

    def _require(self, product_id: int) -> CartItem:
        item = self.cart.find(product_id)
        if item is None:
            raise NotFoundError("Cart item not found")
        return item

    def _recompute(self) -> None:
        totals = compute_totals(self._cart.items, 0, self.tax_rate)
        self._cart.subtotal = totals.subtotal
        self._cart.tax = totals.tax
        self._cart.total = totals.total

    def _commit(self) -> Cart:
        self._recompute()
        save_json(self.storage, self.key, self._cart.to_json())
        for listener in list(self._listeners):
            listener(CART_UPDATED, self._cart)
        return self._cart
