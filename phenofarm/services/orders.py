# phenofarm/services/orders.py
"""Grower-side order management: manual entry, edits, status changes,
batch status updates and cancellation."""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from phenofarm.models.dispensary import Dispensary
from phenofarm.models.order import Order, OrderItem, OrderStatus
from phenofarm.models.product import Product
from phenofarm.services import order_status
from phenofarm.services.checkout import new_order_id
from phenofarm.services.pricing import compute_totals, recompute_order
from phenofarm.utils.errors import (
    ForbiddenError, NotFoundError, TransitionError, ValidationError,
)

logger = logging.getLogger(__name__)

MAX_ITEM_QUANTITY = 9999

# Statuses from which a grower may cancel and restock an order
CANCELLABLE = (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING)


def _check_quantity(quantity: int) -> None:
    if quantity < 1 or quantity > MAX_ITEM_QUANTITY:
        raise ValidationError(f"Quantity must be between 1 and {MAX_ITEM_QUANTITY}", field="quantity")


def get_grower_order(db: Session, grower_id: int, order_pk: int) -> Order:
    order = db.query(Order).filter(Order.id == order_pk, Order.grower_id == grower_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def create_manual_order(db: Session, grower_id: int, dispensary_id: int, items: Iterable[dict],
                        tax_rate: float, shipping_fee_cents: int = 0, notes: Optional[str] = None) -> Order:
    """Order typed in by the grower. ``items``: dicts with product_id, quantity, unit_price_cents."""
    items = list(items)
    if not items:
        raise ValidationError("Missing required fields: dispensary_id and items", field="items")
    if not db.query(Dispensary).filter(Dispensary.id == dispensary_id).first():
        raise NotFoundError("Dispensary not found")

    lines: List[OrderItem] = []
    for item in items:
        _check_quantity(item["quantity"])
        if item["unit_price_cents"] <= 0:
            raise ValidationError(f"Invalid unit price for product {item['product_id']}", field="unit_price")

        product = db.query(Product).filter(
            Product.id == item["product_id"], Product.grower_id == grower_id
        ).with_for_update().first()
        if not product:
            raise NotFoundError(f"Product not found: {item['product_id']}")
        if product.inventory_qty < item["quantity"]:
            raise ValidationError(f"Insufficient inventory for {product.name}", field="quantity")

        product.inventory_qty -= item["quantity"]
        lines.append(OrderItem(
            product_id=product.id,
            quantity=item["quantity"],
            unit_price_cents=item["unit_price_cents"],
            total_price_cents=item["quantity"] * item["unit_price_cents"],
        ))

    totals = compute_totals(lines, shipping_fee_cents, tax_rate)
    order = Order(
        order_id=new_order_id(),
        grower_id=grower_id,
        dispensary_id=dispensary_id,
        status=OrderStatus.PENDING.value,
        subtotal_cents=totals.subtotal,
        tax_cents=totals.tax,
        shipping_fee_cents=totals.shipping,
        total_amount_cents=totals.total,
        notes=notes or None,
        items=lines,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def edit_order(order: Order, *, status=None, notes=None, shipping_fee_cents: Optional[int] = None,
               tax_cents: Optional[int] = None, items: Optional[List[dict]] = None) -> Order:
    """Apply the grower edit form. Does not commit.

    ``items`` (dicts with id and quantity) replaces the line list: lines not
    listed are removed. Status is reassigned without the forward-only check.
    """
    if status is not None:
        order_status.reassign(order, status)
    if notes is not None:
        order.notes = notes
    if shipping_fee_cents is not None:
        if shipping_fee_cents < 0:
            raise ValidationError("Shipping fee cannot be negative", field="shipping_fee")
        order.shipping_fee_cents = shipping_fee_cents
    if tax_cents is not None:
        if tax_cents < 0:
            raise ValidationError("Tax cannot be negative", field="tax")
        order.tax_cents = tax_cents

    if items is not None:
        ids = [entry["id"] for entry in items]
        if len(set(ids)) != len(ids):
            raise ValidationError("Each order item may appear only once", field="items")
        by_id = {line.id: line for line in order.items}
        kept = []
        for entry in items:
            line = by_id.get(entry["id"])
            if line is None:
                raise NotFoundError(f"Order item not found: {entry['id']}")
            _check_quantity(entry["quantity"])
            line.quantity = entry["quantity"]
            kept.append(line)
        if not kept:
            raise ValidationError("An order needs at least one item", field="items")
        # delete-orphan cascade removes dropped lines on flush
        order.items = kept

    recompute_order(order)
    return order


def batch_update_status(db: Session, grower_id: int, order_ids: List[int], target) -> int:
    """All-or-nothing: every id must be one of the grower's orders."""
    if not order_ids:
        raise ValidationError("order_ids array is required", field="order_ids")
    target = order_status.parse_status(target)

    if len(set(order_ids)) != len(order_ids):
        raise ValidationError("order_ids must not contain duplicates", field="order_ids")

    orders = db.query(Order).filter(Order.id.in_(order_ids), Order.grower_id == grower_id).all()
    if len(orders) != len(order_ids):
        raise ForbiddenError("Some orders not found or do not belong to you")

    try:
        updated = order_status.apply_batch(orders, target)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Batch status update to %s failed", target.value)
        raise
    return updated


def cancel_order(db: Session, order: Order) -> Order:
    """Cancel and put the ordered quantities back in stock."""
    if order_status.parse_status(order.status) not in CANCELLABLE:
        raise TransitionError(f"Cannot cancel order with status: {order.status}")

    for line in order.items:
        product = db.query(Product).filter(Product.id == line.product_id).with_for_update().first()
        if product:
            product.inventory_qty += line.quantity

    order_status.transition(order, OrderStatus.CANCELLED)
    db.commit()
    db.refresh(order)
    return order
