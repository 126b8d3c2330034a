from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.config import settings
from storefront.constants.order_status import OrderStatus, ShippingStatus
from storefront.utils.numbers import to_number


class ShippingAddress(BaseModel):
    # postal codes and phone numbers often arrive as JSON numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)

    recipient_name: str
    recipient_phone: str
    postal_code: str
    address_line1: str
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = Field(default_factory=lambda: settings.default_country)


class ProductSnapshot(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    image: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class OrderItemIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    product: int
    product_snapshot: Optional[ProductSnapshot] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    options: Optional[Dict[str, Any]] = None
    cart_item_id: Optional[str] = None

    @field_validator("quantity", "unit_price", "total_price", mode="before")
    @classmethod
    def coerce_number(cls, value):
        return to_number(value)

    @field_validator("cart_item_id", mode="before")
    @classmethod
    def stringify_cart_item_id(cls, value):
        return None if value in (None, "") else str(value)


class PaymentIn(BaseModel):
    """Client-reported payment data.

    Only used to locate the payment at the gateway and as a fallback for
    descriptive fields; amounts and status always come from the gateway.
    """

    model_config = ConfigDict(extra="ignore")

    transaction_id: Optional[str] = None
    imp_uid: Optional[str] = None
    merchant_uid: Optional[str] = None
    method: Optional[str] = None
    provider: Optional[str] = None
    pg_tid: Optional[str] = None
    receipt_url: Optional[str] = None
    currency: Optional[str] = None
    paid_at: Any = None


class Discount(BaseModel):
    type: Optional[str] = None
    label: Optional[str] = None
    amount: float = Field(default=0, ge=0)


class Refund(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0)
    reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
    transaction_id: Optional[str] = None


class OrderCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: List[OrderItemIn]
    shipping_address: ShippingAddress
    payment: PaymentIn = Field(default_factory=PaymentIn)

    order_id: Optional[str] = None
    user: Optional[int] = None
    cart: Optional[int] = None
    status: Optional[str] = None

    sub_total: Optional[float] = None
    shipping_fee: Optional[float] = None
    total_amount: Optional[float] = None
    discounts: List[Discount] = Field(default_factory=list)

    shipping_method: Optional[str] = None
    delivery_note: Optional[str] = None
    memo: Optional[str] = None

    @field_validator("sub_total", "shipping_fee", "total_amount", mode="before")
    @classmethod
    def coerce_amount(cls, value):
        return to_number(value)

    @field_validator("order_id", mode="before")
    @classmethod
    def strip_order_id(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class OwnerOrderPatch(BaseModel):
    """Fields an order owner may change. Anything else is dropped."""

    model_config = ConfigDict(extra="ignore")

    shipping_address: Optional[ShippingAddress] = None
    delivery_note: Optional[str] = None
    memo: Optional[str] = None


class AdminOrderPatch(OwnerOrderPatch):
    status: Optional[OrderStatus] = None
    status_memo: Optional[str] = None

    admin_note: Optional[str] = None
    shipping_method: Optional[str] = None
    shipping_status: Optional[ShippingStatus] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    refund: Optional[Refund] = None
