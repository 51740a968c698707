# phenofarm/routes/price_alerts.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session, joinedload

from phenofarm.database import get_db
from phenofarm.models.product import Product
from phenofarm.models.users import User
from phenofarm.schemas.alerts import PriceAlertCreate, PriceAlertList, PriceAlertOut
from phenofarm.services.price_alerts import PriceAlertStore
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.money import to_cents
from phenofarm.utils.storage import DatabaseStorage
from phenofarm.utils.tokenJWT import get_current_dispensary

router = APIRouter(prefix="/price-alerts", tags=["Price alerts"])


def _store(db: Session, user: User) -> PriceAlertStore:
    return PriceAlertStore(DatabaseStorage(db, user.id))


@router.get("", response_model=PriceAlertList)
def list_alerts(db: Session = Depends(get_db), current_user: User = Depends(get_current_dispensary)):
    return {"alerts": [a.to_json() for a in _store(db, current_user).list()]}


@router.post("", response_model=PriceAlertOut, status_code=status.HTTP_201_CREATED)
def add_alert(
    payload: PriceAlertCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    product = (
        db.query(Product).options(joinedload(Product.grower))
        .filter(Product.id == payload.product_id).first()
    )
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        alert = _store(db, current_user).add(product, to_cents(payload.target_price))
    except DomainError as exc:
        raise http_error(exc) from exc

    write_log(db, user_id=current_user.id, action="PRICE_ALERT_ADD", resource="price_alerts",
              status="SUCCESS", ip=client_ip(request),
              meta={"product_id": product.id, "target_price": payload.target_price})
    return alert.to_json()


@router.delete("/{alert_id}")
def remove_alert(
    alert_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    try:
        _store(db, current_user).remove(alert_id)
    except DomainError as exc:
        raise http_error(exc) from exc

    write_log(db, user_id=current_user.id, action="PRICE_ALERT_REMOVE", resource="price_alerts",
              status="SUCCESS", ip=client_ip(request), meta={"alert_id": alert_id})
    return {"success": True}


# Compare stored alerts with current catalog prices
@router.post("/refresh", response_model=PriceAlertList)
def refresh_alerts(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    store = _store(db, current_user)
    product_ids = [a.product_id for a in store.list()]
    prices = {}
    if product_ids:
        rows = db.query(Product.id, Product.price_cents).filter(Product.id.in_(product_ids)).all()
        prices = {pid: price for pid, price in rows}

    alerts = store.refresh(prices)
    triggered = [a.id for a in alerts if a.is_triggered]

    write_log(db, user_id=current_user.id, action="PRICE_ALERT_REFRESH", resource="price_alerts",
              status="SUCCESS", ip=client_ip(request),
              meta={"alerts": len(alerts), "triggered": len(triggered)})
    return {"alerts": [a.to_json() for a in alerts]}
