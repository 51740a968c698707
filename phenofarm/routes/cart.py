# phenofarm/routes/cart.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session, joinedload

from phenofarm.config import settings
from phenofarm.database import get_db
from phenofarm.models.product import Product
from phenofarm.models.users import User
from phenofarm.schemas.cart import CartAddItem, CartItemOut, CartOut, CartSetQuantity, CartStep
from phenofarm.services.cart_store import Cart, CartStore
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.money import to_float
from phenofarm.utils.storage import DatabaseStorage
from phenofarm.utils.tokenJWT import get_current_dispensary

router = APIRouter(prefix="/cart", tags=["Cart"])
logger = logging.getLogger(__name__)


def get_cart_store(db: Session, user: User) -> CartStore:
    store = CartStore(DatabaseStorage(db, user.id), tax_rate=settings.CATALOG_TAX_RATE)
    store.subscribe(lambda event, cart: logger.debug(
        "%s for user %s: %d line(s)", event, user.id, len(cart.items)))
    return store


def _cart_to_out(cart: Cart) -> CartOut:
    items_out = [
        CartItemOut(
            product_id=it.product_id,
            name=it.name,
            grower_id=it.grower_id,
            grower_name=it.grower_name,
            unit_price=to_float(it.unit_price_cents),
            quantity=it.quantity,
            max_qty=it.max_qty,
            line_total=to_float(it.line_total_cents),
            strain=it.strain,
            unit=it.unit,
            thc=it.thc,
        )
        for it in cart.items
    ]
    return CartOut(
        items=items_out,
        item_count=sum(it.quantity for it in cart.items),
        subtotal=to_float(cart.subtotal),
        tax=to_float(cart.tax),
        total=to_float(cart.total),
    )


def _log(db: Session, user: User, request: Request, action: str, cart: Cart, **meta):
    meta.update({"cart_items": len(cart.items), "total": to_float(cart.total)})
    write_log(db, user_id=user.id, action=action, resource="cart",
              status="SUCCESS", ip=client_ip(request), meta=meta)


@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    return _cart_to_out(get_cart_store(db, current_user).cart)


@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    product = (
        db.query(Product)
        .options(joinedload(Product.grower), joinedload(Product.strain), joinedload(Product.batch))
        .filter(Product.id == payload.product_id)
        .first()
    )
    if not product or not product.is_available:
        raise HTTPException(status_code=404, detail="Product not found")

    store = get_cart_store(db, current_user)
    try:
        cart = store.add_item(product, payload.quantity)
    except DomainError as exc:
        write_log(db, user_id=current_user.id, action="CART_ADD", resource="cart", status="FAIL",
                  ip=client_ip(request), meta={"product_id": product.id, "quantity": payload.quantity,
                                               "reason": exc.message})
        raise http_error(exc) from exc

    _log(db, current_user, request, "CART_ADD", cart, product_id=product.id, quantity=payload.quantity)
    return _cart_to_out(cart)


@router.put("/items/{product_id}", response_model=CartOut)
def set_cart_item_quantity(
    product_id: int,
    payload: CartSetQuantity,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    store = get_cart_store(db, current_user)
    try:
        cart = store.set_quantity(product_id, payload.quantity)
    except DomainError as exc:
        raise http_error(exc) from exc

    _log(db, current_user, request, "CART_UPDATE", cart, product_id=product_id, quantity=payload.quantity)
    return _cart_to_out(cart)


@router.post("/items/{product_id}/step", response_model=CartOut)
def step_cart_item(
    product_id: int,
    payload: CartStep,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    store = get_cart_store(db, current_user)
    try:
        cart = store.step_quantity(product_id, payload.delta)
    except DomainError as exc:
        raise http_error(exc) from exc

    _log(db, current_user, request, "CART_UPDATE", cart, product_id=product_id, delta=payload.delta)
    return _cart_to_out(cart)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_cart_item(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    store = get_cart_store(db, current_user)
    try:
        cart = store.remove_item(product_id)
    except DomainError as exc:
        raise http_error(exc) from exc

    _log(db, current_user, request, "CART_REMOVE", cart, product_id=product_id)
    return _cart_to_out(cart)


@router.delete("", response_model=CartOut)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    cart = get_cart_store(db, current_user).clear()
    _log(db, current_user, request, "CART_CLEAR", cart)
    return _cart_to_out(cart)
