# phenofarm/services/lab_results.py
"""Resolved potency and strain values for a product.

A product either links a batch/strain or carries the legacy inline columns.
The linked record wins whenever it has a value; zero is a value.
Business code reads potency only through these accessors.
"""
from typing import Optional


def _first_present(*values):
    for value in values:
        if value is not None:
            return value
    return None


def resolve_thc(product) -> Optional[float]:
    batch = getattr(product, "batch", None)
    return _first_present(batch.thc if batch is not None else None, product.thc_legacy)


def resolve_cbd(product) -> Optional[float]:
    batch = getattr(product, "batch", None)
    return _first_present(batch.cbd if batch is not None else None, product.cbd_legacy)


def resolve_strain_name(product) -> Optional[str]:
    strain = getattr(product, "strain", None)
    return _first_present(strain.name if strain is not None else None, product.strain_legacy) or None


def infer_strain_type(strain_name: Optional[str], genetics: Optional[str]) -> Optional[str]:
    # Genetics text is checked first, then the strain name
    for text in (genetics or "", strain_name or ""):
        lowered = text.lower()
        for kind in ("indica", "sativa", "hybrid"):
            if kind in lowered:
                return kind.capitalize()
    return None
