# phenofarm/routes/settings.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.dispensary import Dispensary
from phenofarm.models.grower import Grower
from phenofarm.models.users import User
from phenofarm.schemas.settings import BusinessSettingsOut, BusinessSettingsUpdate
from phenofarm.services.business_profile import apply_settings, settings_view
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.tokenJWT import get_current_dispensary, get_current_grower

router = APIRouter(tags=["Settings"])


def _load(db: Session, model, pk: int):
    profile = db.query(model).filter(model.id == pk).first()
    if not profile:
        raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
    return profile


def _save(db: Session, user: User, profile, payload: BusinessSettingsUpdate, request: Request, resource: str):
    data = payload.model_dump(exclude_unset=True)
    try:
        apply_settings(profile, data)
    except DomainError as exc:
        db.rollback()
        raise http_error(exc) from exc

    email = (data.get("email") or "").strip().lower()
    if email and email != user.email:
        taken = db.query(User).filter(func.lower(User.email) == email, User.id != user.id).first()
        if taken:
            db.rollback()
            raise HTTPException(status_code=409, detail="Email already registered")
        user.email = email

    db.commit()
    db.refresh(profile)

    write_log(db, user_id=user.id, action="SETTINGS_UPDATE", resource=resource,
              status="SUCCESS", ip=client_ip(request), meta={"fields": sorted(data)})
    return {"success": True, "message": "Settings saved successfully",
            "settings": settings_view(profile, user.email)}


@router.get("/grower/settings", response_model=BusinessSettingsOut)
def get_grower_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_grower)):
    return settings_view(_load(db, Grower, current_user.grower_id), current_user.email)


@router.put("/grower/settings")
def update_grower_settings(
    payload: BusinessSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    grower = _load(db, Grower, current_user.grower_id)
    return _save(db, current_user, grower, payload, request, "grower_settings")


@router.get("/dispensary/settings", response_model=BusinessSettingsOut)
def get_dispensary_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_dispensary)):
    return settings_view(_load(db, Dispensary, current_user.dispensary_id), current_user.email)


@router.put("/dispensary/settings")
def update_dispensary_settings(
    payload: BusinessSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    dispensary = _load(db, Dispensary, current_user.dispensary_id)
    return _save(db, current_user, dispensary, payload, request, "dispensary_settings")
