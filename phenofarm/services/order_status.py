# phenofarm/services/order_status.py
"""Order lifecycle.

PENDING -> CONFIRMED -> PROCESSING -> SHIPPED -> DELIVERED, with CANCELLED
reachable from every non-terminal state. DELIVERED and CANCELLED are terminal.
A strict transition may skip ahead along the progression but never go back.

Two looser paths exist on purpose:
  * reassign(): the grower's single-order edit form may set any status.
  * apply_batch(): batch actions apply one target to every selected order
    without checking the current state.
"""
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, Optional

from phenofarm.models.order import OrderStatus
from phenofarm.utils.errors import TransitionError, ValidationError

PROGRESSION = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

TERMINAL: FrozenSet[OrderStatus] = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def _build_transitions() -> Dict[OrderStatus, FrozenSet[OrderStatus]]:
    table = {}
    for index, status in enumerate(PROGRESSION):
        if status in TERMINAL:
            table[status] = frozenset()
            continue
        table[status] = frozenset(PROGRESSION[index + 1:]) | {OrderStatus.CANCELLED}
    table[OrderStatus.CANCELLED] = frozenset()
    return table


TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = _build_transitions()

# Grower batch actions
BATCH_ACTIONS: Dict[str, OrderStatus] = {
    "confirm": OrderStatus.CONFIRMED,
    "process": OrderStatus.PROCESSING,
    "ship": OrderStatus.SHIPPED,
    "deliver": OrderStatus.DELIVERED,
    "cancel": OrderStatus.CANCELLED,
}


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).upper())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}", field="status")


def allowed_targets(current) -> FrozenSet[OrderStatus]:
    return TRANSITIONS[parse_status(current)]


def can_transition(current, target) -> bool:
    return parse_status(target) in allowed_targets(current)


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL


def _stamp(order, target: OrderStatus, now: Optional[datetime]) -> None:
    now = now or datetime.now(timezone.utc)
    if target == OrderStatus.SHIPPED and not order.shipped_at:
        order.shipped_at = now
    if target == OrderStatus.DELIVERED and not order.delivered_at:
        order.delivered_at = now


def transition(order, target, now: Optional[datetime] = None) -> bool:
    """Strict move. Returns False when the order already has ``target``."""
    current = parse_status(order.status)
    target = parse_status(target)
    if current == target:
        return False
    if target not in TRANSITIONS[current]:
        raise TransitionError(f"Cannot go from {current.value} to {target.value}")
    order.status = target.value
    _stamp(order, target, now)
    return True


def reassign(order, target, now: Optional[datetime] = None) -> bool:
    """Single-order edit form: any status may be chosen, including going back."""
    target = parse_status(target)
    if parse_status(order.status) == target:
        return False
    order.status = target.value
    _stamp(order, target, now)
    return True


def apply_batch(orders: Iterable, target, now: Optional[datetime] = None) -> int:
    """Apply ``target`` to every order unconditionally. Returns updated_count."""
    target = parse_status(target)
    now = now or datetime.now(timezone.utc)
    updated = 0
    for order in orders:
        order.status = target.value
        # Batch updates always restamp, matching the bulk endpoint
        if target == OrderStatus.SHIPPED:
            order.shipped_at = now
        elif target == OrderStatus.DELIVERED:
            order.delivered_at = now
        updated += 1
    return updated
