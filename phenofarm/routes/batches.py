# phenofarm/routes/batches.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.batch import Batch
from phenofarm.models.product import Product
from phenofarm.models.strain import Strain
from phenofarm.models.users import User
from phenofarm.schemas.batch import BatchCreate, BatchOut, BatchProductOut, BatchUpdate
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.money import to_float
from phenofarm.utils.tokenJWT import get_current_grower

router = APIRouter(prefix="/batches", tags=["Batches"])


def _batch_to_out(batch: Batch, with_products: bool = False) -> BatchOut:
    products = []
    if with_products:
        products = [
            BatchProductOut(id=p.id, name=p.name, inventory_qty=p.inventory_qty, price=to_float(p.price_cents))
            for p in batch.products
        ]
    return BatchOut(
        id=batch.id,
        batch_number=batch.batch_number,
        lot_number=batch.lot_number,
        harvest_date=batch.harvest_date,
        strain_id=batch.strain_id,
        strain_name=batch.strain.name if batch.strain else None,
        thc=batch.thc,
        cbd=batch.cbd,
        total_cannabinoids=batch.total_cannabinoids,
        terpenes=batch.terpenes,
        test_results=batch.test_results,
        coa_document_url=batch.coa_document_url,
        notes=batch.notes,
        product_count=len(batch.products),
        products=products,
    )


def _get_own_batch(db: Session, grower_id: int, batch_id: int) -> Batch:
    batch = db.query(Batch).filter(Batch.id == batch_id, Batch.grower_id == grower_id).first()
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch


def _check_strain(db: Session, grower_id: int, strain_id: int) -> None:
    if not db.query(Strain).filter(Strain.id == strain_id, Strain.grower_id == grower_id).first():
        raise HTTPException(status_code=404, detail="Strain not found")


def _check_number_free(db: Session, grower_id: int, batch_number: str) -> None:
    if db.query(Batch).filter(Batch.grower_id == grower_id, Batch.batch_number == batch_number).first():
        raise HTTPException(status_code=409, detail="A batch with this number already exists")


# Newest harvest first, optionally narrowed to one strain
@router.get("", response_model=List[BatchOut])
def list_batches(
    strain_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    query = db.query(Batch).filter(Batch.grower_id == current_user.grower_id)
    if strain_id is not None:
        query = query.filter(Batch.strain_id == strain_id)
    batches = query.order_by(Batch.harvest_date.desc(), Batch.id.desc()).all()
    return [_batch_to_out(b) for b in batches]


@router.get("/{batch_id}", response_model=BatchOut)
def get_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    return _batch_to_out(_get_own_batch(db, current_user.grower_id, batch_id), with_products=True)


@router.post("", response_model=BatchOut, status_code=status.HTTP_201_CREATED)
def create_batch(
    payload: BatchCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    grower_id = current_user.grower_id
    _check_strain(db, grower_id, payload.strain_id)
    _check_number_free(db, grower_id, payload.batch_number)

    batch = Batch(grower_id=grower_id, **payload.model_dump())
    db.add(batch)
    db.commit()
    db.refresh(batch)

    write_log(db, user_id=current_user.id, action="BATCH_CREATE", resource="batches",
              status="SUCCESS", ip=client_ip(request),
              meta={"batch_id": batch.id, "batch_number": batch.batch_number})
    return _batch_to_out(batch)


@router.put("/{batch_id}", response_model=BatchOut)
def update_batch(
    batch_id: int,
    payload: BatchUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    grower_id = current_user.grower_id
    batch = _get_own_batch(db, grower_id, batch_id)
    data = payload.model_dump(exclude_unset=True)

    # Required columns are only changed when a value is given
    for key in ("batch_number", "harvest_date", "strain_id"):
        if data.get(key) is None:
            data.pop(key, None)

    if "batch_number" in data and data["batch_number"] != batch.batch_number:
        _check_number_free(db, grower_id, data["batch_number"])
    if "strain_id" in data and data["strain_id"] != batch.strain_id:
        _check_strain(db, grower_id, data["strain_id"])

    for key, value in data.items():
        setattr(batch, key, value)
    db.commit()
    db.refresh(batch)

    write_log(db, user_id=current_user.id, action="BATCH_UPDATE", resource="batches",
              status="SUCCESS", ip=client_ip(request), meta={"batch_id": batch.id, "fields": sorted(data)})
    return _batch_to_out(batch)


@router.delete("/{batch_id}")
def delete_batch(
    batch_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    batch = _get_own_batch(db, current_user.grower_id, batch_id)
    if db.query(Product).filter(Product.batch_id == batch.id).count():
        raise HTTPException(status_code=409, detail="Cannot delete batch with associated products")

    db.delete(batch)
    db.commit()

    write_log(db, user_id=current_user.id, action="BATCH_DELETE", resource="batches",
              status="SUCCESS", ip=client_ip(request), meta={"batch_id": batch_id})
    return {"message": "Batch deleted successfully"}
