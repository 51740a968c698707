# phenofarm/schemas/order.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

OrderStatusValue = Literal["PENDING", "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED"]


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    total_price: float


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    order_id: str
    grower_id: int
    dispensary_id: int
    dispensary_name: Optional[str] = None
    status: str
    subtotal: float
    tax: float
    shipping_fee: float
    total_amount: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    items: List[OrderItemOut]


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


# Grower manual order entry
class ManualOrderItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1, le=9999)
    unit_price: float = Field(gt=0)


class OrderCreatePayload(BaseModel):
    dispensary_id: int
    items: List[ManualOrderItem] = Field(min_length=1)
    shipping_fee: float = Field(default=0, ge=0)
    notes: Optional[str] = None


# Grower edit form
class OrderEditItem(BaseModel):
    id: int
    quantity: int = Field(ge=1, le=9999)


class OrderEditPayload(BaseModel):
    status: Optional[OrderStatusValue] = None
    notes: Optional[str] = None
    shipping_fee: Optional[float] = Field(None, ge=0)
    tax: Optional[float] = Field(None, ge=0)
    items: Optional[List[OrderEditItem]] = None


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: str


class BatchStatusPayload(BaseModel):
    order_ids: List[int]
    status: str


class BatchStatusResponse(BaseModel):
    success: bool = True
    updated_count: int
    status: str


# Dispensary checkout of the stored cart
class CheckoutPayload(BaseModel):
    notes: Optional[str] = None


class CheckoutOrderRef(BaseModel):
    id: int
    order_id: str


class CheckoutResponse(BaseModel):
    success: bool
    orders: List[CheckoutOrderRef]
    order_count: int
    errors: Optional[List[str]] = None
