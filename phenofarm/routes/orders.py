# phenofarm/routes/orders.py
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session, joinedload

from phenofarm.config import settings
from phenofarm.database import get_db
from phenofarm.models.order import Order, OrderItem
from phenofarm.models.users import User
from phenofarm.schemas.order import (
    BatchStatusPayload, BatchStatusResponse, OrderCreatePayload, OrderEditPayload,
    OrderItemOut, OrderResponse, OrdersPage, OrderStatusPatch,
)
from phenofarm.services import order_status
from phenofarm.services import orders as order_service
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.money import to_cents, to_float
from phenofarm.utils.tokenJWT import get_current_grower

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        items.append(OrderItemOut(
            id=it.id,
            product_id=it.product_id,
            product_name=it.product.name if it.product else "Deleted product",
            quantity=it.quantity,
            unit_price=to_float(it.unit_price_cents),
            total_price=to_float(it.total_price_cents),
        ))
    return OrderResponse(
        id=order.id,
        order_id=order.order_id,
        grower_id=order.grower_id,
        dispensary_id=order.dispensary_id,
        dispensary_name=order.dispensary.business_name if order.dispensary else None,
        status=order.status,
        subtotal=to_float(order.subtotal_cents),
        tax=to_float(order.tax_cents),
        shipping_fee=to_float(order.shipping_fee_cents),
        total_amount=to_float(order.total_amount_cents),
        notes=order.notes,
        created_at=order.created_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
        items=items,
    )


def _fail(db: Session, exc: DomainError):
    # Nothing from a rejected request may reach the next commit
    db.rollback()
    return http_error(exc)


def _load_order(db: Session, user: User, order_pk: int) -> Order:
    try:
        return order_service.get_grower_order(db, user.grower_id, order_pk)
    except DomainError as exc:
        raise http_error(exc) from exc


@router.get("", response_model=OrdersPage)
def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    query = db.query(Order).filter(Order.grower_id == current_user.grower_id)
    if status_filter:
        try:
            query = query.filter(Order.status == order_status.parse_status(status_filter).value)
        except DomainError as exc:
            raise http_error(exc) from exc

    total = query.count()
    orders = (
        query.options(joinedload(Order.dispensary), joinedload(Order.items).joinedload(OrderItem.product))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return OrdersPage(items=[_order_to_out(o) for o in orders], total=total, page=page, page_size=page_size)


# Manual order entry by the grower
@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    items = [
        {"product_id": it.product_id, "quantity": it.quantity, "unit_price_cents": to_cents(it.unit_price)}
        for it in payload.items
    ]
    try:
        order = order_service.create_manual_order(
            db,
            current_user.grower_id,
            payload.dispensary_id,
            items,
            tax_rate=settings.ORDER_TAX_RATE,
            shipping_fee_cents=to_cents(payload.shipping_fee),
            notes=payload.notes,
        )
    except DomainError as exc:
        raise _fail(db, exc) from exc

    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders",
              status="SUCCESS", ip=client_ip(request),
              meta={"order_id": order.order_id, "total": to_float(order.total_amount_cents)})
    return _order_to_out(order)


# Declared before "/{order_id}" routes
@router.patch("/batch-status", response_model=BatchStatusResponse)
def batch_status(
    payload: BatchStatusPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    try:
        updated = order_service.batch_update_status(
            db, current_user.grower_id, payload.order_ids, payload.status)
    except DomainError as exc:
        write_log(db, user_id=current_user.id, action="ORDER_BATCH_STATUS", resource="orders",
                  status="FAIL", ip=client_ip(request),
                  meta={"order_ids": payload.order_ids, "reason": exc.message})
        raise http_error(exc) from exc

    new_status = order_status.parse_status(payload.status).value
    write_log(db, user_id=current_user.id, action="ORDER_BATCH_STATUS", resource="orders",
              status="SUCCESS", ip=client_ip(request),
              meta={"order_ids": payload.order_ids, "status": new_status, "updated": updated})
    return BatchStatusResponse(success=True, updated_count=updated, status=new_status)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    return _order_to_out(_load_order(db, current_user, order_id))


# Edit form: status, notes, fees and line quantities
@router.put("/{order_id}", response_model=OrderResponse)
def edit_order(
    order_id: int,
    payload: OrderEditPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    order = _load_order(db, current_user, order_id)
    previous_status = order.status
    try:
        order_service.edit_order(
            order,
            status=payload.status,
            notes=payload.notes,
            shipping_fee_cents=to_cents(payload.shipping_fee) if payload.shipping_fee is not None else None,
            tax_cents=to_cents(payload.tax) if payload.tax is not None else None,
            items=[it.model_dump() for it in payload.items] if payload.items is not None else None,
        )
        db.commit()
    except DomainError as exc:
        raise _fail(db, exc) from exc
    db.refresh(order)

    write_log(db, user_id=current_user.id, action="ORDER_EDIT", resource="orders",
              status="SUCCESS", ip=client_ip(request),
              meta={"order_id": order.order_id, "from": previous_status, "to": order.status,
                    "total": to_float(order.total_amount_cents)})
    return _order_to_out(order)


# Strict state machine
@router.patch("/{order_id}/status", response_model=OrderResponse)
def change_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    order = _load_order(db, current_user, order_id)
    previous_status = order.status
    try:
        order_status.transition(order, payload.status)
        db.commit()
    except DomainError as exc:
        write_log(db, user_id=current_user.id, action="ORDER_STATUS", resource="orders",
                  status="FAIL", ip=client_ip(request),
                  meta={"order_id": order.order_id, "from": previous_status, "to": payload.status})
        raise _fail(db, exc) from exc
    db.refresh(order)

    write_log(db, user_id=current_user.id, action="ORDER_STATUS", resource="orders",
              status="SUCCESS", ip=client_ip(request),
              meta={"order_id": order.order_id, "from": previous_status, "to": order.status})
    return _order_to_out(order)


# Cancel and restock; orders are never deleted
@router.delete("/{order_id}", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    order = _load_order(db, current_user, order_id)
    try:
        order = order_service.cancel_order(db, order)
    except DomainError as exc:
        raise _fail(db, exc) from exc

    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="orders",
              status="SUCCESS", ip=client_ip(request), meta={"order_id": order.order_id})
    return _order_to_out(order)
