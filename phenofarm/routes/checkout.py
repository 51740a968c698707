# phenofarm/routes/checkout.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from phenofarm.config import settings
from phenofarm.database import get_db
from phenofarm.models.users import User
from phenofarm.routes.cart import get_cart_store
from phenofarm.schemas.order import CheckoutPayload, CheckoutResponse
from phenofarm.services.checkout import checkout_cart
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.tokenJWT import get_current_dispensary

router = APIRouter(tags=["Checkout"])
logger = logging.getLogger(__name__)


@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    request: Request,
    payload: CheckoutPayload = CheckoutPayload(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    store = get_cart_store(db, current_user)
    try:
        result = checkout_cart(db, store, current_user.dispensary_id,
                               settings.ORDER_TAX_RATE, payload.notes or None)
    except DomainError as exc:
        raise http_error(exc) from exc

    write_log(
        db,
        user_id=current_user.id,
        action="CHECKOUT",
        resource="orders",
        status="SUCCESS" if result.success else "FAIL",
        ip=client_ip(request),
        meta={"orders": [o.order_id for o in result.orders], "errors": result.errors},
    )

    if not result.success:
        raise HTTPException(status_code=400, detail={"message": "No orders could be created",
                                                     "errors": result.errors})

    return CheckoutResponse(
        success=True,
        orders=[{"id": o.id, "order_id": o.order_id} for o in result.orders],
        order_count=len(result.orders),
        errors=result.errors or None,
    )
