"""Order creation and payment reconciliation.

The flow is strictly sequential: validate, detect duplicates, verify the
payment with the provider, gate on the verified payment status, persist the
order in one write, then tidy up the originating cart.
"""

import logging
import random
import time
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, or_, select

from storefront.config import settings
from storefront.constants.order_status import (
    COMPLETED_PAYMENT_STATUSES,
    OrderItemStatus,
    OrderStatus,
    PaymentStatus,
)
from storefront.errors import (
    AuthorizationError,
    ConflictError,
    GatewayVerificationError,
    NotFoundError,
    ValidationError,
)
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.order_schemas import OrderCreate, OrderItemIn, PaymentIn, ProductSnapshot
from storefront.services.cart_cleanup import cleanup_cart_after_order
from storefront.services.order_history import history_entry
from storefront.services.payment_gateway import IamportClient, PaymentRecord
from storefront.services.payment_mapping import (
    convert_timestamp,
    map_payment_method,
    map_payment_status,
    order_status_from_payment,
)
from storefront.utils.numbers import non_negative, round_amount, to_number

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ("name", "sku", "image", "brand", "category", "description")


def generate_order_id() -> str:
    return f"ORD-{int(time.time() * 1000)}-{random.randint(0, 9999):04d}"


def find_duplicate_order(
    session: Session,
    order_ref: Optional[str],
    transaction_ids: Iterable[Optional[str]] = (),
    merchant_uid: Optional[str] = None,
) -> Optional[Order]:
    conditions = []
    if order_ref:
        conditions.append(Order.order_id == order_ref)

    transaction_ids = sorted({t for t in transaction_ids if t})
    if transaction_ids:
        conditions.append(Order.payment_transaction_id.in_(transaction_ids))

    if merchant_uid:
        conditions.append(Order.payment_merchant_uid == merchant_uid)

    if not conditions:
        return None

    return session.exec(select(Order).where(or_(*conditions))).first()


def resolve_owner(session: Session, requested_user_id: Optional[int], caller: User) -> int:
    if requested_user_id is None or requested_user_id == caller.id:
        return caller.id

    if not caller.is_admin:
        raise AuthorizationError("You cannot create an order for another user")

    if session.get(User, requested_user_id) is None:
        raise NotFoundError("User not found")

    return requested_user_id


def resolve_requested_status(status: Optional[str], caller: User) -> Optional[OrderStatus]:
    # only admins may set the initial status; customers' values are dropped
    if not status or not caller.is_admin:
        return None
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid order status: {status}")


def verify_payment(
    gateway: IamportClient,
    *,
    transaction_id: Optional[str],
    merchant_uid: Optional[str],
    amount: Optional[float],
) -> PaymentRecord:
    """Confirm the payment with the provider instead of trusting the client."""
    if not transaction_id:
        raise GatewayVerificationError("A payment transaction id is required for verification")

    record = gateway.fetch_payment(transaction_id)

    if merchant_uid and record.merchant_uid and merchant_uid != record.merchant_uid:
        logger.warning(
            f"Merchant reference mismatch for {transaction_id}: "
            f"order {merchant_uid}, payment {record.merchant_uid}"
        )
        raise GatewayVerificationError("The order reference does not match the payment")

    expected = to_number(amount)
    if expected is not None and expected > 0:
        paid = to_number(record.amount)
        if paid is None or round_amount(paid) != round_amount(expected):
            logger.warning(
                f"Amount mismatch for {transaction_id}: expected {expected}, paid {record.amount}"
            )
            raise GatewayVerificationError("The paid amount does not match the order total")

    return record


def build_payment(
    record: PaymentRecord,
    client: PaymentIn,
    *,
    transaction_id: str,
    merchant_uid: Optional[str],
    total_amount: float,
) -> dict:
    paid_at = convert_timestamp(record.paid_at) or convert_timestamp(client.paid_at)
    imp_uid = record.imp_uid or transaction_id

    return {
        "method": map_payment_method(record.pay_method, client.method).value,
        "provider": record.pg_provider or record.card_name or client.provider,
        "transaction_id": imp_uid,
        "imp_uid": imp_uid,
        "merchant_uid": record.merchant_uid or merchant_uid,
        "pg_tid": record.pg_tid or client.pg_tid,
        "receipt_url": record.receipt_url or client.receipt_url,
        "amount_paid": non_negative(record.amount, total_amount),
        "currency": record.currency or client.currency or settings.default_currency,
        "status": map_payment_status(record.status).value,
        "paid_at": paid_at.isoformat() if paid_at else None,
    }


def build_snapshot(product: Optional[Product], supplied: Optional[ProductSnapshot]) -> dict:
    snapshot = supplied.model_dump() if supplied else dict.fromkeys(SNAPSHOT_FIELDS)
    if product is None:
        return snapshot

    live = {
        "name": product.name,
        "sku": product.product_id,
        "image": product.image,
        "brand": product.brand,
        "category": product.category,
        "description": product.description,
    }
    for key, value in live.items():
        if value is not None:
            snapshot[key] = value
    return snapshot


def normalize_item(session: Session, item: OrderItemIn) -> dict:
    quantity = to_number(item.quantity)
    quantity = int(quantity) if quantity is not None and quantity >= 1 else 1
    unit_price = non_negative(item.unit_price)
    total_price = non_negative(item.total_price, unit_price * quantity)

    return {
        "product": item.product,
        "product_snapshot": build_snapshot(session.get(Product, item.product), item.product_snapshot),
        "quantity": quantity,
        "unit_price": unit_price,
        "total_price": total_price,
        "options": item.options,
        "status": OrderItemStatus.ready.value,
    }


def _persist(session: Session, order: Order, payment_in: PaymentIn) -> Order:
    order_ref = order.order_id
    transaction_ids = (order.payment_transaction_id, payment_in.transaction_id, payment_in.imp_uid)
    merchant_uid = order.payment_merchant_uid

    session.add(order)
    try:
        session.commit()
    except IntegrityError:
        # a concurrent request won the race past the duplicate check
        session.rollback()
        winner = find_duplicate_order(session, order_ref, transaction_ids, merchant_uid)
        logger.warning(f"Unique constraint rejected order {order_ref}; treating as duplicate")
        raise ConflictError(data=serialize_order(session, winner) if winner else None)

    session.refresh(order)
    return order


def create_order(
    session: Session,
    draft: OrderCreate,
    caller: User,
    gateway: IamportClient,
) -> Order:
    if not draft.items:
        raise ValidationError("An order requires at least one item")

    owner_id = resolve_owner(session, draft.user, caller)
    requested_status = resolve_requested_status(draft.status, caller)

    payment_in = draft.payment
    order_ref = draft.order_id or payment_in.merchant_uid

    existing = find_duplicate_order(
        session,
        order_ref,
        (payment_in.transaction_id, payment_in.imp_uid),
        payment_in.merchant_uid,
    )
    if existing:
        logger.info(f"Duplicate order submission matched order {existing.order_id}")
        raise ConflictError(data=serialize_order(session, existing))

    sub_total = non_negative(draft.sub_total)
    shipping_fee = non_negative(draft.shipping_fee)
    total_amount = non_negative(draft.total_amount, sub_total + shipping_fee)

    transaction_id = payment_in.imp_uid or payment_in.transaction_id
    record = verify_payment(
        gateway,
        transaction_id=transaction_id,
        merchant_uid=order_ref,
        amount=total_amount,
    )

    payment = build_payment(
        record,
        payment_in,
        transaction_id=transaction_id,
        merchant_uid=order_ref,
        total_amount=total_amount,
    )
    payment_status = PaymentStatus(payment["status"])

    if payment_status not in COMPLETED_PAYMENT_STATUSES:
        logger.warning(f"Payment {transaction_id} is {payment_status.value}; order not created")
        raise ValidationError("Payment has not been completed")

    status = requested_status or order_status_from_payment(payment_status)

    items = [normalize_item(session, item) for item in draft.items]
    cart_item_ids = [item.cart_item_id for item in draft.items if item.cart_item_id]

    order = Order(
        order_id=order_ref or generate_order_id(),
        user_id=owner_id,
        cart_id=draft.cart,
        status=status.value,
        status_history=[history_entry(status.value, caller.id)],
        payment=payment,
        payment_transaction_id=payment["transaction_id"],
        payment_merchant_uid=payment["merchant_uid"],
        sub_total=sub_total,
        shipping_fee=shipping_fee,
        total_amount=total_amount,
        discounts=[d.model_dump() for d in draft.discounts],
        items=items,
        shipping_address=draft.shipping_address.model_dump(),
        shipping_method=draft.shipping_method or "standard",
        delivery_note=draft.delivery_note,
        memo=draft.memo,
    )
    order = _persist(session, order, payment_in)
    logger.info(f"Order {order.order_id} created for user {owner_id} ({total_amount})")

    cleanup_cart_after_order(session, draft.cart, cart_item_ids, caller)

    session.refresh(order)
    return order


def _product_refs(session: Session, orders: List[Order]) -> dict:
    ids = {item.get("product") for order in orders for item in (order.items or [])}
    ids.discard(None)
    if not ids:
        return {}
    products = session.exec(select(Product).where(Product.id.in_(ids))).all()
    return {
        p.id: {"id": p.id, "name": p.name, "price": p.price, "image": p.image}
        for p in products
    }


def serialize_orders(session: Session, orders: List[Order]) -> List[dict]:
    """Order payloads with user and product references resolved."""
    products = _product_refs(session, orders)
    users = {}
    result = []

    for order in orders:
        if order.user_id not in users:
            user = session.get(User, order.user_id)
            users[order.user_id] = (
                {"id": user.id, "name": user.name, "email": user.email} if user else None
            )

        data = order.model_dump(exclude={"payment_transaction_id", "payment_merchant_uid", "cart_id"})
        data["cart"] = order.cart_id
        data["user"] = users[order.user_id]
        data["items"] = [
            {**item, "product": products.get(item.get("product"), item.get("product"))}
            for item in (order.items or [])
        ]
        result.append(data)

    return result


def serialize_order(session: Session, order: Order) -> dict:
    return serialize_orders(session, [order])[0]


def get_order_or_404(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order
