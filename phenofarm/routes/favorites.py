# phenofarm/routes/favorites.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.product import Product
from phenofarm.models.users import User
from phenofarm.routes.catalog import catalog_product_out, load_catalog
from phenofarm.schemas.catalog import FavoriteIds, FavoriteProductsOut, FavoriteToggleOut
from phenofarm.services.favorites import FavoritesStore
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.storage import DatabaseStorage
from phenofarm.utils.tokenJWT import get_current_dispensary

router = APIRouter(prefix="/favorites", tags=["Favorites"])


def _store(db: Session, user: User) -> FavoritesStore:
    return FavoritesStore(DatabaseStorage(db, user.id))


@router.get("", response_model=FavoriteIds)
def list_favorites(db: Session = Depends(get_db), current_user: User = Depends(get_current_dispensary)):
    return {"product_ids": _store(db, current_user).ids()}


@router.post("/{product_id}/toggle", response_model=FavoriteToggleOut)
def toggle_favorite(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    if not db.query(Product).filter(Product.id == product_id).first():
        raise HTTPException(status_code=404, detail="Product not found")

    store = _store(db, current_user)
    is_favorite = store.toggle(product_id)

    write_log(db, user_id=current_user.id, action="FAVORITE_TOGGLE", resource="favorites",
              status="SUCCESS", ip=client_ip(request),
              meta={"product_id": product_id, "is_favorite": is_favorite})
    return {"product_id": product_id, "is_favorite": is_favorite, "product_ids": store.ids()}


@router.delete("", response_model=FavoriteIds)
def clear_favorites(db: Session = Depends(get_db), current_user: User = Depends(get_current_dispensary)):
    store = _store(db, current_user)
    store.clear()
    return {"product_ids": []}


# Hydrate stored ids into catalog cards; unknown or unavailable ids are dropped
@router.post("/products", response_model=FavoriteProductsOut)
def favorite_products(
    payload: FavoriteIds,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    ids = [int(value) for value in payload.product_ids if str(value).isdigit()]
    if not ids:
        return {"products": []}
    by_id = {p.id: p for p in load_catalog(db, product_ids=ids)}
    # Keep the order the ids were favorited in
    return {"products": [catalog_product_out(by_id[i]) for i in ids if i in by_id]}
