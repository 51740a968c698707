# phenofarm/services/catalog.py
"""Dispensary catalog: filtering, sorting and grower grouping.

Pure functions over lists of CatalogProduct. Filters combine with AND across
categories and OR within a category. Range membership is half-open
(min <= value < max), so a boundary value belongs to exactly one range.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from phenofarm.services.lab_results import resolve_cbd, resolve_strain_name, resolve_thc
from phenofarm.utils.errors import ValidationError


@dataclass(frozen=True)
class Range:
    id: str
    label: str
    min: float
    max: float

    def contains(self, value: Optional[float]) -> bool:
        if value is None:
            return False
        return self.min <= value < self.max


THC_RANGES = (
    Range("low", "< 15%", 0, 15),
    Range("medium", "15% - 20%", 15, 20),
    Range("high", "20% - 25%", 20, 25),
    Range("very-high", "25%+", 25, 100),
)

# Dollar bounds
PRICE_RANGES = (
    Range("budget", "Under $5", 0, 5),
    Range("standard", "$5 - $10", 5, 10),
    Range("premium", "$10 - $25", 10, 25),
    Range("luxury", "$25+", 25, 10000),
)

PRODUCT_TYPES = ("Flower", "Edibles", "Cartridge", "Concentrate", "Pre-roll", "Tincture", "Topical", "Drink")

SORT_OPTIONS: Dict[str, str] = {
    "default": "Default (Grower)",
    "price-asc": "Price: Low to High",
    "price-desc": "Price: High to Low",
    "thc-desc": "THC: High to Low",
    "thc-asc": "THC: Low to High",
    "name-asc": "Name: A-Z",
    "name-desc": "Name: Z-A",
}

ALL_PRODUCTS_GROUP = "all"


@dataclass
class CatalogProduct:
    id: int
    name: str
    price_cents: int
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
    images: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def from_product(cls, product) -> "CatalogProduct":
        grower = product.grower
        return cls(
            id=product.id,
            name=product.name,
            price_cents=product.price_cents,
            grower_id=product.grower_id,
            grower_name=grower.business_name if grower is not None else "",
            inventory_qty=product.inventory_qty,
            product_type=product.product_type,
            sub_type=product.sub_type,
            unit=product.unit,
            strain=resolve_strain_name(product),
            strain_id=product.strain_id,
            thc=resolve_thc(product),
            cbd=resolve_cbd(product),
            images=list(product.images or []),
            created_at=product.created_at,
        )


@dataclass
class CatalogFilters:
    product_types: List[str] = field(default_factory=list)
    thc_range_ids: List[str] = field(default_factory=list)
    price_range_ids: List[str] = field(default_factory=list)
    search_query: str = ""

    def active_count(self) -> int:
        return len(self.product_types) + len(self.thc_range_ids) + len(self.price_range_ids)


def _lookup_ranges(ids: Sequence[str], ranges: Sequence[Range], kind: str) -> List[Range]:
    known = {r.id: r for r in ranges}
    unknown = [i for i in ids if i not in known]
    if unknown:
        raise ValidationError(f"Unknown {kind} range: {', '.join(unknown)}", field=f"{kind}_ranges")
    return [known[i] for i in ids]


def _matches_search(product: CatalogProduct, query: str) -> bool:
    needle = query.casefold()
    for value in (product.name, product.strain, product.product_type):
        if isinstance(value, str) and needle in value.casefold():
            return True
    return False


def filter_products(products: Sequence[CatalogProduct], filters: CatalogFilters) -> List[CatalogProduct]:
    thc_ranges = _lookup_ranges(filters.thc_range_ids, THC_RANGES, "thc")
    price_ranges = _lookup_ranges(filters.price_range_ids, PRICE_RANGES, "price")
    types = set(filters.product_types)
    query = (filters.search_query or "").strip()

    result = []
    for product in products:
        if types and product.product_type not in types:
            continue
        if thc_ranges and not any(r.contains(product.thc) for r in thc_ranges):
            continue
        if price_ranges:
            dollars = product.price_cents / 100
            if not any(r.contains(dollars) for r in price_ranges):
                continue
        if query and not _matches_search(product, query):
            continue
        result.append(product)
    return result


_SORT_KEYS: Dict[str, Callable[[CatalogProduct], object]] = {
    "price": lambda p: p.price_cents,
    "thc": lambda p: p.thc if p.thc is not None else 0,
    "name": lambda p: p.name.casefold(),
}


def sort_products(products: Sequence[CatalogProduct], sort_option: str = "default") -> List[CatalogProduct]:
    if sort_option not in SORT_OPTIONS:
        raise ValidationError(f"Unknown sort option: {sort_option}", field="sort_by")
    if sort_option == "default":
        return list(products)
    attribute, direction = sort_option.split("-")
    return sorted(products, key=_SORT_KEYS[attribute], reverse=(direction == "desc"))


def group_products(products: Sequence[CatalogProduct], sort_option: str = "default") -> List[dict]:
    """Grower groups for the default sort, one pseudo-group otherwise."""
    if sort_option != "default":
        return [{"grower_id": ALL_PRODUCTS_GROUP, "grower_name": "All Products", "products": list(products)}]

    groups: Dict[int, dict] = {}
    for product in products:
        group = groups.get(product.grower_id)
        if group is None:
            group = {"grower_id": product.grower_id, "grower_name": product.grower_name, "products": []}
            groups[product.grower_id] = group
        group["products"].append(product)
    return list(groups.values())

