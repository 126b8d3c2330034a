from datetime import datetime
from typing import Optional, Tuple

from sqlmodel import Session, select

from storefront.constants.order_status import CartStatus
from storefront.errors import NotFoundError
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.schemas.cart_schemas import CartAddRequest, CartItemUpdateRequest, CartUpdateRequest


def format_cart(cart: Optional[Cart]) -> Optional[dict]:
    if cart is None:
        return None
    return {
        "id": cart.id,
        "user": cart.user_id,
        "status": cart.status,
        "note": cart.note,
        "metadata": cart.meta,
        "created_at": cart.created_at,
        "updated_at": cart.updated_at,
        "total": cart.calculate_total(),
        "items": [
            {
                "id": item.id,
                "product": item.product_id,
                "quantity": item.quantity,
                "price": item.price,
                "options": item.options,
                "added_at": item.added_at,
            }
            for item in cart.items
        ],
    }


def find_cart(session: Session, user_id: int) -> Optional[Cart]:
    # one active cart per user; the oldest wins if a race ever created two
    return session.exec(
        select(Cart).where(Cart.user_id == user_id).order_by(Cart.id)
    ).first()


def get_cart_or_404(session: Session, user_id: int) -> Cart:
    cart = find_cart(session, user_id)
    if cart is None:
        raise NotFoundError("Cart not found")
    return cart


def create_or_get_cart(session: Session, user_id: int) -> Tuple[Cart, bool]:
    cart = find_cart(session, user_id)
    if cart is not None:
        return cart, False

    cart = Cart(user_id=user_id, status=CartStatus.active.value)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart, True


def _touch(cart: Cart):
    cart.updated_at = datetime.utcnow()


def add_item(session: Session, user_id: int, data: CartAddRequest) -> Cart:
    product = session.get(Product, data.product_id)
    if not product:
        raise NotFoundError("Product not found")

    cart = find_cart(session, user_id)
    if cart is None:
        cart = Cart(user_id=user_id, status=CartStatus.active.value)
        session.add(cart)

    existing = next((i for i in cart.items if i.product_id == product.id), None)

    if existing:
        existing.quantity += data.quantity
        if data.price is not None:
            existing.price = data.price
        if data.options is not None:
            existing.options = data.options
    else:
        cart.items.append(
            CartItem(
                product_id=product.id,
                quantity=data.quantity,
                price=data.price if data.price is not None else product.price,
                options=data.options,
            )
        )

    _touch(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def _get_item(cart: Cart, item_id: int) -> CartItem:
    item = next((i for i in cart.items if i.id == item_id), None)
    if item is None:
        raise NotFoundError("Cart item not found")
    return item


def update_item(session: Session, user_id: int, item_id: int, data: CartItemUpdateRequest) -> Cart:
    cart = get_cart_or_404(session, user_id)
    item = _get_item(cart, item_id)

    if data.quantity is not None:
        item.quantity = data.quantity
    if data.price is not None:
        item.price = data.price
    if data.options is not None:
        item.options = data.options

    _touch(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def remove_item(session: Session, user_id: int, item_id: int) -> Optional[Cart]:
    """Remove one line. Returns None when that emptied (and deleted) the cart."""
    cart = get_cart_or_404(session, user_id)
    item = _get_item(cart, item_id)

    if len(cart.items) == 1:
        session.delete(cart)
        session.commit()
        return None

    cart.items.remove(item)
    _touch(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def clear_cart(session: Session, user_id: int):
    # empty carts are not kept around
    cart = get_cart_or_404(session, user_id)
    session.delete(cart)
    session.commit()


def update_cart(session: Session, user_id: int, data: CartUpdateRequest) -> Cart:
    cart = get_cart_or_404(session, user_id)

    if data.status is not None:
        cart.status = data.status.value
    if data.note is not None:
        cart.note = data.note
    if data.metadata is not None:
        cart.meta = data.metadata

    _touch(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart
