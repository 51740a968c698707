"""
Tests for catalog filtering, sorting and grouping.
"""
import pytest

from phenofarm.services.catalog import (
    ALL_PRODUCTS_GROUP, THC_RANGES, CatalogFilters, CatalogProduct,
    filter_products, group_products, sort_products,
)
from phenofarm.utils.errors import ValidationError


def _p(pid, name, price_cents, thc, grower_id=1, product_type="Flower", strain=None):
    return CatalogProduct(id=pid, name=name, price_cents=price_cents, grower_id=grower_id,
                          grower_name=f"Grower {grower_id}", inventory_qty=10,
                          product_type=product_type, thc=thc, strain=strain)


@pytest.fixture
def products():
    return [
        _p(1, "Blue Dream", 3200, 18.5, grower_id=1, strain="Blue Dream"),
        _p(2, "Gummies", 450, None, grower_id=2, product_type="Edibles"),
        _p(3, "Northern Lights", 3600, 22.0, grower_id=1),
        _p(4, "Vape", 900, 20.0, grower_id=2, product_type="Cartridge"),
    ]


def test_thc_boundary_belongs_to_higher_range():
    medium = next(r for r in THC_RANGES if r.id == "medium")
    high = next(r for r in THC_RANGES if r.id == "high")

    assert not medium.contains(20.0)
    assert high.contains(20.0)
    assert sum(r.contains(20.0) for r in THC_RANGES) == 1


def test_filter_thc_range_excludes_unknown_thc(products):
    result = filter_products(products, CatalogFilters(thc_range_ids=["high"]))
    assert [p.id for p in result] == [3, 4]


def test_or_within_and_across_categories(products):
    filters = CatalogFilters(product_types=["Flower", "Cartridge"], price_range_ids=["standard", "luxury"])
    # Flower/Cartridge AND ($5-$10 OR $25+)
    assert [p.id for p in filter_products(products, filters)] == [1, 3, 4]
    assert filters.active_count() == 4


def test_search_matches_name_strain_or_type(products):
    assert [p.id for p in filter_products(products, CatalogFilters(search_query="edib"))] == [2]
    assert [p.id for p in filter_products(products, CatalogFilters(search_query=" blue "))] == [1]


def test_unknown_range_id(products):
    with pytest.raises(ValidationError):
        filter_products(products, CatalogFilters(price_range_ids=["free"]))


def test_sorting(products):
    assert [p.id for p in sort_products(products, "price-asc")] == [2, 4, 1, 3]
    assert [p.id for p in sort_products(products, "thc-desc")] == [3, 4, 1, 2]
    assert [p.id for p in sort_products(products, "name-asc")] == [1, 2, 3, 4]
    assert sort_products(products, "default") == products
    with pytest.raises(ValidationError):
        sort_products(products, "random")


def test_group_by_grower_in_first_seen_order(products):
    groups = group_products(products)
    assert [g["grower_id"] for g in groups] == [1, 2]
    assert [p.id for p in groups[0]["products"]] == [1, 3]


def test_sorted_view_is_one_group(products):
    groups = group_products(sort_products(products, "price-desc"), "price-desc")
    assert len(groups) == 1
    assert groups[0]["grower_id"] == ALL_PRODUCTS_GROUP
    assert [p.id for p in groups[0]["products"]] == [3, 1, 4, 2]
