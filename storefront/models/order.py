from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime


class Order(SQLModel, table=True):
    """A placed order.

    Nested parts (items, payment, shipping address, status history) live in
    JSON columns so an order is written with a single INSERT.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    cart_id: Optional[int] = None  # originating cart, used for cleanup only

    status: str = Field(default="pending", index=True)
    status_history: List[dict] = Field(default_factory=list, sa_column=Column(JSON))

    payment: dict = Field(default_factory=dict, sa_column=Column(JSON))
    payment_transaction_id: Optional[str] = Field(default=None, index=True, unique=True)
    payment_merchant_uid: Optional[str] = Field(default=None, index=True)

    sub_total: float = Field(ge=0)
    shipping_fee: float = Field(default=0, ge=0)
    discounts: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    total_amount: float = Field(ge=0)

    items: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    shipping_address: dict = Field(default_factory=dict, sa_column=Column(JSON))

    shipping_method: str = Field(default="standard")
    shipping_status: str = Field(default="pending")
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    delivery_note: Optional[str] = None

    memo: Optional[str] = None
    admin_note: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    refund: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
