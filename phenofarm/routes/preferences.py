# phenofarm/routes/preferences.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.users import User
from phenofarm.schemas.alerts import ViewModeOut, ViewModeUpdate
from phenofarm.services.preferences import get_view_mode, set_view_mode
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.storage import DatabaseStorage
from phenofarm.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/preferences", tags=["Preferences"])


@router.get("/{key}", response_model=ViewModeOut)
def read_preference(key: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        mode = get_view_mode(DatabaseStorage(db, current_user.id), key)
    except DomainError as exc:
        raise http_error(exc) from exc
    return {"key": key, "mode": mode}


@router.put("/{key}", response_model=ViewModeOut)
def write_preference(
    key: str,
    payload: ViewModeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        mode = set_view_mode(DatabaseStorage(db, current_user.id), key, payload.mode)
    except DomainError as exc:
        raise http_error(exc) from exc
    return {"key": key, "mode": mode}
