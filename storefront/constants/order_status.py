from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    preparing = "preparing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"
    refunded = "refunded"


class PaymentStatus(str, Enum):
    pending = "pending"
    authorized = "authorized"
    captured = "captured"
    failed = "failed"
    refunded = "refunded"


class PaymentMethod(str, Enum):
    card = "card"
    bank_transfer = "bank_transfer"
    virtual_account = "virtual_account"
    mobile = "mobile"
    other = "other"


class ShippingStatus(str, Enum):
    pending = "pending"
    packed = "packed"
    shipped = "shipped"
    delivered = "delivered"


class OrderItemStatus(str, Enum):
    ready = "ready"
    shipped = "shipped"
    cancelled = "cancelled"
    refunded = "refunded"


class CartStatus(str, Enum):
    active = "active"
    saved = "saved"
    ordered = "ordered"


class UserType(str, Enum):
    customer = "customer"
    admin = "admin"


# payment states that allow an order to be persisted
COMPLETED_PAYMENT_STATUSES = {PaymentStatus.captured, PaymentStatus.authorized}
