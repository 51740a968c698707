# phenofarm/schemas/catalog.py
from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional, Union


class CatalogProductOut(BaseModel):
    id: int
    name: str
    price: float
    grower_id: int
    grower_name: str
    inventory_qty: int
    product_type: Optional[str] = None
    sub_type: Optional[str] = None
    unit: Optional[str] = None
    strain: Optional[str] = None
    strain_id: Optional[int] = None
    thc: Optional[float] = None
    cbd: Optional[float] = None
    images: List[str] = []
    created_at: Optional[datetime] = None


class CatalogGroupOut(BaseModel):
    grower_id: Union[int, str]
    grower_name: str
    products: List[CatalogProductOut]


class Pagination(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_more: bool


# Default sort returns grower groups, any other sort a flat product list
class CatalogPage(BaseModel):
    products: List[CatalogProductOut]
    groups: List[CatalogGroupOut]
    active_filter_count: int
    pagination: Pagination


class FavoriteIds(BaseModel):
    product_ids: List[str]


class FavoriteToggleOut(BaseModel):
    product_id: int
    is_favorite: bool
    product_ids: List[str]


class FavoriteProductsOut(BaseModel):
    products: List[CatalogProductOut]
