from pydantic import BaseModel, Field
from typing import Dict, Optional

from storefront.constants.order_status import CartStatus


class CartAddRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    price: Optional[float] = Field(default=None, ge=0)
    options: Optional[Dict[str, str]] = None


class CartItemUpdateRequest(BaseModel):
    quantity: Optional[int] = Field(default=None, ge=1)
    price: Optional[float] = Field(default=None, ge=0)
    options: Optional[Dict[str, str]] = None


class CartUpdateRequest(BaseModel):
    status: Optional[CartStatus] = None
    note: Optional[str] = Field(default=None, max_length=500)
    metadata: Optional[Dict[str, str]] = None
