# phenofarm/schemas/batch.py
from datetime import date
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

Percent = Optional[float]


class BatchCreate(BaseModel):
    batch_number: str = Field(min_length=1)
    harvest_date: date
    strain_id: int
    lot_number: Optional[str] = None
    thc: Percent = Field(None, ge=0, le=100)
    cbd: Percent = Field(None, ge=0, le=100)
    total_cannabinoids: Percent = Field(None, ge=0, le=100)
    terpenes: Optional[Dict[str, float]] = None
    test_results: Optional[Dict[str, Any]] = None
    coa_document_url: Optional[str] = None
    notes: Optional[str] = None


# Partial update; fields left out are not touched, explicit nulls clear values
class BatchUpdate(BaseModel):
    batch_number: Optional[str] = Field(None, min_length=1)
    harvest_date: Optional[date] = None
    strain_id: Optional[int] = None
    lot_number: Optional[str] = None
    thc: Percent = Field(None, ge=0, le=100)
    cbd: Percent = Field(None, ge=0, le=100)
    total_cannabinoids: Percent = Field(None, ge=0, le=100)
    terpenes: Optional[Dict[str, float]] = None
    test_results: Optional[Dict[str, Any]] = None
    coa_document_url: Optional[str] = None
    notes: Optional[str] = None


class BatchProductOut(BaseModel):
    id: int
    name: str
    inventory_qty: int
    price: float


class BatchOut(BaseModel):
    id: int
    batch_number: str
    lot_number: Optional[str] = None
    harvest_date: date
    strain_id: int
    strain_name: Optional[str] = None
    thc: Percent = None
    cbd: Percent = None
    total_cannabinoids: Percent = None
    terpenes: Optional[Dict[str, float]] = None
    test_results: Optional[Dict[str, Any]] = None
    coa_document_url: Optional[str] = None
    notes: Optional[str] = None
    product_count: int = 0
    products: List[BatchProductOut] = []
