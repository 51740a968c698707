# phenofarm/routes/strains.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from phenofarm.database import get_db
from phenofarm.models.batch import Batch
from phenofarm.models.product import Product
from phenofarm.models.strain import Strain
from phenofarm.models.users import User
from phenofarm.schemas.strain import StrainCreate, StrainOut, StrainUpdate
from phenofarm.services.lab_results import infer_strain_type
from phenofarm.utils.audit import client_ip, write_log
from phenofarm.utils.tokenJWT import get_current_grower

router = APIRouter(prefix="/strains", tags=["Strains"])


def _strain_to_out(strain: Strain) -> StrainOut:
    return StrainOut(
        id=strain.id,
        name=strain.name,
        genetics=strain.genetics,
        description=strain.description,
        strain_type=infer_strain_type(strain.name, strain.genetics),
    )


def _get_own_strain(db: Session, grower_id: int, strain_id: int) -> Strain:
    strain = db.query(Strain).filter(Strain.id == strain_id, Strain.grower_id == grower_id).first()
    if not strain:
        raise HTTPException(status_code=404, detail="Strain not found")
    return strain


def _name_taken(db: Session, grower_id: int, name: str, exclude_id: int = None) -> bool:
    query = db.query(Strain).filter(Strain.grower_id == grower_id, func.lower(Strain.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Strain.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=List[StrainOut])
def list_strains(db: Session = Depends(get_db), current_user: User = Depends(get_current_grower)):
    strains = db.query(Strain).filter(Strain.grower_id == current_user.grower_id).order_by(Strain.name).all()
    return [_strain_to_out(s) for s in strains]


@router.post("", response_model=StrainOut, status_code=status.HTTP_201_CREATED)
def create_strain(
    payload: StrainCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    name = payload.name.strip()
    if _name_taken(db, current_user.grower_id, name):
        raise HTTPException(status_code=409, detail="A strain with this name already exists")

    strain = Strain(grower_id=current_user.grower_id, name=name,
                    genetics=payload.genetics, description=payload.description)
    db.add(strain)
    db.commit()
    db.refresh(strain)

    write_log(db, user_id=current_user.id, action="STRAIN_CREATE", resource="strains",
              status="SUCCESS", ip=client_ip(request), meta={"strain_id": strain.id, "name": strain.name})
    return _strain_to_out(strain)


@router.put("/{strain_id}", response_model=StrainOut)
def update_strain(
    strain_id: int,
    payload: StrainUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    strain = _get_own_strain(db, current_user.grower_id, strain_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("name") is not None:
        name = data["name"].strip()
        if _name_taken(db, current_user.grower_id, name, exclude_id=strain.id):
            raise HTTPException(status_code=409, detail="A strain with this name already exists")
        strain.name = name
    if "genetics" in data:
        strain.genetics = data["genetics"]
    if "description" in data:
        strain.description = data["description"]

    db.commit()
    db.refresh(strain)

    write_log(db, user_id=current_user.id, action="STRAIN_UPDATE", resource="strains",
              status="SUCCESS", ip=client_ip(request), meta={"strain_id": strain.id})
    return _strain_to_out(strain)


@router.delete("/{strain_id}")
def delete_strain(
    strain_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_grower),
):
    strain = _get_own_strain(db, current_user.grower_id, strain_id)

    batch_count = db.query(Batch).filter(Batch.strain_id == strain.id).count()
    product_count = db.query(Product).filter(Product.strain_id == strain.id).count()
    if batch_count or product_count:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot delete strain used by {batch_count} batch(es) and {product_count} product(s)",
        )

    db.delete(strain)
    db.commit()

    write_log(db, user_id=current_user.id, action="STRAIN_DELETE", resource="strains",
              status="SUCCESS", ip=client_ip(request), meta={"strain_id": strain_id})
    return {"success": True, "id": strain_id}
