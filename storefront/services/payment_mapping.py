"""Translate the provider's payment vocabulary into our own enums."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from storefront.constants.order_status import OrderStatus, PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)


class GatewayPaymentStatus(str, Enum):
    ready = "ready"
    paid = "paid"
    cancelled = "cancelled"
    failed = "failed"


class GatewayPayMethod(str, Enum):
    card = "card"
    trans = "trans"
    vbank = "vbank"
    phone = "phone"


def _parse(enum_cls, raw: Optional[str]):
    try:
        return enum_cls(raw)
    except ValueError:
        return None


def gateway_status_to_payment_status(status: GatewayPaymentStatus) -> PaymentStatus:
    match status:
        case GatewayPaymentStatus.paid:
            return PaymentStatus.captured
        case GatewayPaymentStatus.ready:
            return PaymentStatus.authorized
        case GatewayPaymentStatus.cancelled:
            return PaymentStatus.refunded
        case GatewayPaymentStatus.failed:
            return PaymentStatus.failed
    raise ValueError(f"Unmapped gateway payment status: {status!r}")


def gateway_method_to_payment_method(method: GatewayPayMethod) -> PaymentMethod:
    match method:
        case GatewayPayMethod.card:
            return PaymentMethod.card
        case GatewayPayMethod.trans:
            return PaymentMethod.bank_transfer
        case GatewayPayMethod.vbank:
            return PaymentMethod.virtual_account
        case GatewayPayMethod.phone:
            return PaymentMethod.mobile
    raise ValueError(f"Unmapped gateway pay method: {method!r}")


def map_payment_status(raw: Optional[str]) -> PaymentStatus:
    """Unknown values map to pending; the client's own status is never used."""
    status = _parse(GatewayPaymentStatus, raw)
    if status is None:
        logger.warning(f"Unknown gateway payment status {raw!r}, treating as pending")
        return PaymentStatus.pending
    return gateway_status_to_payment_status(status)


def map_payment_method(raw: Optional[str], fallback: Optional[str] = None) -> PaymentMethod:
    method = _parse(GatewayPayMethod, raw)
    if method is not None:
        return gateway_method_to_payment_method(method)

    if raw is not None:
        logger.warning(f"Unknown gateway pay method {raw!r}")

    return _parse(PaymentMethod, fallback) or PaymentMethod.other


def order_status_from_payment(status: PaymentStatus) -> OrderStatus:
    match status:
        case PaymentStatus.captured | PaymentStatus.authorized:
            return OrderStatus.paid
        case PaymentStatus.failed | PaymentStatus.refunded:
            return OrderStatus.cancelled
        case _:
            return OrderStatus.pending


def convert_timestamp(value: Any) -> Optional[datetime]:
    """Provider timestamps are unix seconds; ISO strings are accepted too."""
    if value in (None, "", 0):
        return None

    if isinstance(value, datetime):
        return value

    try:
        seconds = float(value)
    except (TypeError, ValueError):
        seconds = None

    if seconds is not None:
        if seconds <= 0:
            return None
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)

    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
