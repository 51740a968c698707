# phenofarm/services/checkout.py
"""Dispensary checkout: turns the persisted cart into one PENDING order per grower.

Stock is re-validated and decremented here under row locks; the cart-side
inventory checks are only advisory. Lines without enough stock are skipped
and reported, the rest of the checkout goes through.
"""
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy.orm import Session

from phenofarm.models.order import Order, OrderItem, OrderStatus
from phenofarm.models.product import Product
from phenofarm.services.cart_store import CartItem, CartStore
from phenofarm.services.pricing import compute_totals
from phenofarm.utils.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    orders: List[Order] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    ordered_product_ids: List[int] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.orders) > 0


def new_order_id() -> str:
    """Human-readable id ORD-<ms timestamp>-<random suffix>, safe across concurrent requests."""
    millis = int(time.time() * 1000)
    return f"ORD-{millis}-{uuid.uuid4().hex[:8].upper()}"


def group_by_grower(items: List[CartItem]) -> Dict[int, List[CartItem]]:
    groups: Dict[int, List[CartItem]] = {}
    for item in items:
        groups.setdefault(item.grower_id, []).append(item)
    return groups


def checkout(db: Session, dispensary_id: int, items: List[CartItem], tax_rate: float,
             notes: str = None) -> CheckoutResult:
    if not items:
        raise ValidationError("Cart is empty")

    result = CheckoutResult()

    for grower_id, grower_items in group_by_grower(items).items():
        lines: List[OrderItem] = []
        for item in grower_items:
            product = db.query(Product).filter(
                Product.id == item.product_id, Product.grower_id == grower_id
            ).with_for_update().first()

            short = not product or not product.is_available or product.inventory_qty < item.quantity
            if item.quantity < 1 or short:
                result.errors.append(f"{item.product_id}: insufficient inventory")
                continue

            product.inventory_qty -= item.quantity
            lines.append(OrderItem(
                product_id=product.id,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                total_price_cents=item.quantity * item.unit_price_cents,
            ))
            result.ordered_product_ids.append(product.id)

        if not lines:
            continue

        totals = compute_totals(lines, 0, tax_rate)
        order = Order(
            order_id=new_order_id(),
            grower_id=grower_id,
            dispensary_id=dispensary_id,
            status=OrderStatus.PENDING.value,
            subtotal_cents=totals.subtotal,
            tax_cents=totals.tax,
            shipping_fee_cents=0,
            total_amount_cents=totals.total,
            notes=notes,
            items=lines,
        )
        db.add(order)
        result.orders.append(order)

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Checkout failed for dispensary %s", dispensary_id)
        raise

    for order in result.orders:
        db.refresh(order)
    logger.info("Checkout for dispensary %s created %d order(s), %d error(s)",
                dispensary_id, len(result.orders), len(result.errors))
    return result


def checkout_cart(db: Session, store: CartStore, dispensary_id: int, tax_rate: float,
                  notes: str = None) -> CheckoutResult:
    """Checkout the stored cart, then drop the lines that became orders."""
    result = checkout(db, dispensary_id, list(store.cart.items), tax_rate, notes)
    for product_id in result.ordered_product_ids:
        store.remove_item(product_id)
    return result
