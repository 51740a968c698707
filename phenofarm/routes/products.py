# phenofarm/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.batch import Batch
from phenofarm.models.product import Product
from phenofarm.models.strain import Strain
from phenofarm.models.users import User
from phenofarm.schemas import product as product_schemas
from phenofarm.services.lab_results import resolve_cbd, resolve_strain_name, resolve_thc
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.money import to_cents, to_float
from phenofarm.utils.tokenJWT import get_current_grower

router = APIRouter(prefix="/products", tags=["Products"])


# ---- HELPERS ----
def _product_to_out(p: Product) -> product_schemas.ProductOut:
    return product_schemas.ProductOut(
        id=p.id,
        grower_id=p.grower_id,
        name=p.name,
        product_type=p.product_type,
        sub_type=p.sub_type,
        unit=p.unit,
        price=to_float(p.price_cents),
        inventory_qty=p.inventory_qty,
        is_available=p.is_available,
        description=p.description,
        images=list(p.images or []),
        strain_id=p.strain_id,
        batch_id=p.batch_id,
        strain=resolve_strain_name(p),
        thc=resolve_thc(p),
        cbd=resolve_cbd(p),
        created_at=p.created_at,
    )


def _get_own_product(db: Session, grower_id: int, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.grower_id == grower_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_links(db: Session, grower_id: int, strain_id: Optional[int], batch_id: Optional[int]) -> None:
    """Linked strain and batch must be the grower's own records."""
    if strain_id is not None:
        if not db.query(Strain).filter(Strain.id == strain_id, Strain.grower_id == grower_id).first():
            raise HTTPException(status_code=404, detail="Strain not found")
    if batch_id is not None:
        batch = db.query(Batch).filter(Batch.id == batch_id, Batch.grower_id == grower_id).first()
        if not batch:
            raise HTTPException(status_code=404, detail="Batch not found")
        if strain_id is not None and batch.strain_id != strain_id:
            raise HTTPException(status_code=400, detail="Batch belongs to a different strain")


# =========================
# LIST
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    name: Optional[str] = Query(None),
    product_type: Optional[str] = Query(None),
    include_unavailable: bool = Query(True),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    query = db.query(Product).filter(Product.grower_id == current_user.grower_id)

    if name:
        query = query.filter(Product.name.ilike(f"%{name}%"))
    if product_type:
        query = query.filter(Product.product_type == product_type)
    if not include_unavailable:
        query = query.filter(Product.is_available.is_(True))

    total = query.count()
    items: List[Product] = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * page_size).limit(page_size).all()
    )
    return {
        "items": [_product_to_out(p) for p in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    return _product_to_out(_get_own_product(db, current_user.grower_id, product_id))


# =========================
# CREATE
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    _check_links(db, current_user.grower_id, payload.strain_id, payload.batch_id)

    data = payload.model_dump(exclude={"price"})
    product = Product(grower_id=current_user.grower_id, price_cents=to_cents(payload.price), **data)
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"product_id": product.id, "name": product.name})
    return _product_to_out(product)


# =========================
# UPDATE
# =========================
@router.patch("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    product = _get_own_product(db, current_user.grower_id, product_id)
    data = payload.model_dump(exclude_unset=True)

    strain_id = data.get("strain_id", product.strain_id)
    batch_id = data.get("batch_id", product.batch_id)
    if "strain_id" in data or "batch_id" in data:
        _check_links(db, current_user.grower_id, strain_id, batch_id)

    if "price" in data:
        price = data.pop("price")
        if price is None:
            raise HTTPException(status_code=400, detail="Price is required")
        product.price_cents = to_cents(price)
    for field in ("name", "product_type", "unit", "inventory_qty", "is_available", "images"):
        if field in data and data[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be empty")

    for key, value in data.items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              status="SUCCESS", ip=client_ip(request),
              meta={"product_id": product.id, "fields": sorted(payload.model_dump(exclude_unset=True))})
    return _product_to_out(product)


@router.patch("/{product_id}/availability", response_model=product_schemas.ProductOut)
def toggle_availability(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    product = _get_own_product(db, current_user.grower_id, product_id)
    product.is_available = not product.is_available
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_AVAILABILITY", resource="products",
              status="SUCCESS", ip=client_ip(request),
              meta={"product_id": product.id, "is_available": product.is_available})
    return _product_to_out(product)


# =========================
# DELETE
# =========================
@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    # Products referenced by orders are kept; deleting only hides them from the catalog
    product = _get_own_product(db, current_user.grower_id, product_id)
    product.is_available = False
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"product_id": product_id})
    return {"success": True, "id": product_id}
