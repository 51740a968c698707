# phenofarm/routes/catalog.py
import math
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload

from phenofarm.database import get_db
from phenofarm.models.grower import Grower
from phenofarm.models.product import Product
from phenofarm.models.users import User
from phenofarm.schemas.catalog import CatalogGroupOut, CatalogPage, CatalogProductOut
from phenofarm.services import catalog as catalog_service
from phenofarm.utils.errors import DomainError, http_error
from phenofarm.utils.money import to_float
from phenofarm.utils.tokenJWT import get_current_dispensary

router = APIRouter(prefix="/catalog", tags=["Catalog"])

PAGE_SIZE = 12


def catalog_product_out(p: catalog_service.CatalogProduct) -> CatalogProductOut:
    return CatalogProductOut(
        id=p.id,
        name=p.name,
        price=to_float(p.price_cents),
        grower_id=p.grower_id,
        grower_name=p.grower_name,
        inventory_qty=p.inventory_qty,
        product_type=p.product_type,
        sub_type=p.sub_type,
        unit=p.unit,
        strain=p.strain,
        strain_id=p.strain_id,
        thc=p.thc,
        cbd=p.cbd,
        images=p.images,
        created_at=p.created_at,
    )


def load_catalog(db: Session, grower_id: Optional[int] = None,
                 product_ids: Optional[List[int]] = None) -> List[catalog_service.CatalogProduct]:
    """Available, in-stock products ordered by grower name then product name."""
    query = (
        db.query(Product)
        .join(Grower, Product.grower_id == Grower.id)
        .options(joinedload(Product.grower), joinedload(Product.strain), joinedload(Product.batch))
        .filter(Product.is_available.is_(True), Product.inventory_qty > 0)
    )
    if grower_id is not None:
        query = query.filter(Product.grower_id == grower_id)
    if product_ids is not None:
        query = query.filter(Product.id.in_(product_ids))
    products = query.order_by(Grower.business_name.asc(), Product.name.asc(), Product.id.asc()).all()
    return [catalog_service.CatalogProduct.from_product(p) for p in products]


@router.get("/products", response_model=CatalogPage)
def browse_catalog(
    product_types: List[str] = Query(default=[]),
    thc_ranges: List[str] = Query(default=[]),
    price_ranges: List[str] = Query(default=[]),
    search: str = Query(""),
    sort_by: str = Query("default"),
    grower_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(PAGE_SIZE, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_dispensary),
):
    filters = catalog_service.CatalogFilters(
        product_types=product_types,
        thc_range_ids=thc_ranges,
        price_range_ids=price_ranges,
        search_query=search,
    )
    try:
        matched = catalog_service.filter_products(load_catalog(db, grower_id), filters)
        ordered = catalog_service.sort_products(matched, sort_by)
    except DomainError as exc:
        raise http_error(exc) from exc

    total = len(ordered)
    page_items = ordered[(page - 1) * limit: page * limit]
    groups = catalog_service.group_products(page_items, sort_by)

    return CatalogPage(
        products=[catalog_product_out(p) for p in page_items],
        groups=[
            CatalogGroupOut(
                grower_id=g["grower_id"],
                grower_name=g["grower_name"],
                products=[catalog_product_out(p) for p in g["products"]],
            )
            for g in groups
        ],
        active_filter_count=filters.active_count(),
        pagination={
            "page": page,
            "limit": limit,
            "total_count": total,
            "total_pages": math.ceil(total / limit) if total else 0,
            "has_more": page * limit < total,
        },
    )


@router.get("/options")
def catalog_options(current_user: User = Depends(get_current_dispensary)):
    """Filter and sort choices for the catalog toolbar."""
    return {
        "product_types": list(catalog_service.PRODUCT_TYPES),
        "thc_ranges": [{"id": r.id, "label": r.label} for r in catalog_service.THC_RANGES],
        "price_ranges": [{"id": r.id, "label": r.label} for r in catalog_service.PRICE_RANGES],
        "sort_options": [{"id": k, "label": v} for k, v in catalog_service.SORT_OPTIONS.items()],
    }
