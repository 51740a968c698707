# phenofarm/routes/stripe.py
import httpx
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.grower import Grower
from phenofarm.models.users import User
from phenofarm.schemas.settings import StripeAccountOut, StripeConnectOut
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.stripe_client import StripeClient, StripeNotConfigured, get_stripe_client
from phenofarm.utils.tokenJWT import get_current_grower

router = APIRouter(prefix="/stripe", tags=["Stripe"])
logger = logging.getLogger(__name__)


def _grower(db: Session, user: User) -> Grower:
    grower = db.query(Grower).filter(Grower.id == user.grower_id).first()
    if not grower:
        raise HTTPException(status_code=404, detail="Grower record not found")
    return grower


@router.post("/connect", response_model=StripeConnectOut)
async def connect_account(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
    stripe: StripeClient = Depends(get_stripe_client),
):
    grower = _grower(db, current_user)
    if grower.stripe_account_id:
        raise HTTPException(status_code=400, detail="Account already connected")

    try:
        account = await stripe.create_account(current_user.email, grower.business_name, grower.website)
        grower.stripe_account_id = account["id"]
        grower.stripe_account_status = "pending"
        db.commit()
        link = await stripe.create_account_link(account["id"])
    except StripeNotConfigured as exc:
        raise HTTPException(status_code=503, detail="Payments are not configured") from exc
    except (httpx.RequestError, httpx.HTTPStatusError) as exc:
        write_log(db, user_id=current_user.id, action="STRIPE_CONNECT", resource="stripe",
                  status="FAIL", ip=client_ip(request), meta={"reason": str(exc)})
        raise HTTPException(status_code=502, detail="Failed to create Stripe account") from exc

    write_log(db, user_id=current_user.id, action="STRIPE_CONNECT", resource="stripe",
              status="SUCCESS", ip=client_ip(request), meta={"stripe_account_id": account["id"]})
    return StripeConnectOut(success=True, url=link.get("url"), stripe_account_id=account["id"])


@router.get("/account", response_model=StripeAccountOut)
async def account_status(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
    stripe: StripeClient = Depends(get_stripe_client),
):
    grower = _grower(db, current_user)
    if not grower.stripe_account_id:
        return StripeAccountOut(connected=False)

    try:
        account = await stripe.retrieve_account(grower.stripe_account_id)
    except StripeNotConfigured as exc:
        raise HTTPException(status_code=503, detail="Payments are not configured") from exc
    except (httpx.RequestError, httpx.HTTPStatusError) as exc:
        raise HTTPException(status_code=502, detail="Failed to fetch account status") from exc

    ready = account.get("details_submitted") and account.get("charges_enabled") and account.get("payouts_enabled")
    if ready and grower.stripe_account_status != "active":
        grower.stripe_account_status = "active"
        db.commit()
        logger.info("Stripe account %s of grower %s is active", grower.stripe_account_id, grower.id)

    return StripeAccountOut(connected=True, stripe_account_id=grower.stripe_account_id,
                            status=grower.stripe_account_status)
