# phenofarm/schemas/alerts.py
from pydantic import BaseModel, Field
from typing import List, Optional


class PriceAlertCreate(BaseModel):
    product_id: int
    target_price: float = Field(gt=0)


class PriceAlertOut(BaseModel):
    id: str
    product_id: int
    product_name: str
    grower_id: Optional[int] = None
    grower_name: Optional[str] = None
    target_price: float
    current_price: float
    created_at: str
    is_triggered: bool
    triggered_at: Optional[str] = None
    original_price: Optional[float] = None
    discount_percent: Optional[int] = None


class PriceAlertList(BaseModel):
    alerts: List[PriceAlertOut]


class ViewModeUpdate(BaseModel):
    mode: str


class ViewModeOut(BaseModel):
    key: str
    mode: str
