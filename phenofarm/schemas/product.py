# phenofarm/schemas/product.py
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new product; price in dollars
class ProductCreate(ORMBase):
    name: str = Field(min_length=1)
    product_type: str = Field(min_length=1)
    sub_type: Optional[str] = None
    unit: str = "gram"
    price: float = Field(gt=0)
    inventory_qty: int = Field(ge=0)
    is_available: bool = True
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)

    strain_id: Optional[int] = None
    batch_id: Optional[int] = None
    # Legacy inline values, used when no strain/batch is linked
    strain_legacy: Optional[str] = None
    thc_legacy: Optional[float] = Field(default=None, ge=0, le=100)
    cbd_legacy: Optional[float] = Field(default=None, ge=0, le=100)


# Schema for partial product updates
class ProductEditRequest(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = None
    product_type: Optional[str] = None
    sub_type: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    inventory_qty: Optional[int] = Field(None, ge=0)
    is_available: Optional[bool] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    strain_id: Optional[int] = None
    batch_id: Optional[int] = None
    strain_legacy: Optional[str] = None
    thc_legacy: Optional[float] = Field(None, ge=0, le=100)
    cbd_legacy: Optional[float] = Field(None, ge=0, le=100)


# Product as shown to its grower, potency already resolved
class ProductOut(ORMBase):
    id: int
    grower_id: int
    name: str
    product_type: str
    sub_type: Optional[str] = None
    unit: str
    price: float
    inventory_qty: int
    is_available: bool
    description: Optional[str] = None
    images: List[str] = []
    strain_id: Optional[int] = None
    batch_id: Optional[int] = None
    strain: Optional[str] = None
    thc: Optional[float] = None
    cbd: Optional[float] = None
    created_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
