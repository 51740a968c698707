# phenofarm/schemas/cart.py
from pydantic import BaseModel, Field
from typing import List, Optional

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Exact quantity from the cart page input; clamped to [1, max_qty]
class CartSetQuantity(BaseModel):
    quantity: int

# +/- stepper
class CartStep(BaseModel):
    delta: int

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    product_id: int
    name: str
    grower_id: int
    grower_name: str
    unit_price: float
    quantity: int
    max_qty: int
    line_total: float
    strain: Optional[str] = None
    unit: Optional[str] = None
    thc: Optional[float] = None

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    item_count: int
    subtotal: float
    tax: float
    total: float
