from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlmodel import Session

from storefront.database import get_session
from storefront.errors import AuthorizationError, envelope
from storefront.models.user import User
from storefront.schemas.cart_schemas import CartAddRequest, CartItemUpdateRequest, CartUpdateRequest
from storefront.services import cart_service
from storefront.services.cart_service import format_cart
from storefront.utils.token import get_current_user

router = APIRouter()


def require_cart_access(
    user_id: int,
    current_user: User = Depends(get_current_user),
) -> User:
    if current_user.is_admin or current_user.id == user_id:
        return current_user
    raise AuthorizationError("You do not have access to this cart")


# Create or fetch cart

@router.post("/{user_id}")
def create_or_get_cart(
    user_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart, created = cart_service.create_or_get_cart(session, user_id)

    if not created:
        return envelope(True, message="Existing cart found", data=format_cart(cart))

    return JSONResponse(
        status_code=201,
        content=jsonable_encoder(envelope(True, message="Cart created", data=format_cart(cart))),
    )


@router.get("/{user_id}")
def get_cart(
    user_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart = cart_service.get_cart_or_404(session, user_id)
    return envelope(True, data=format_cart(cart))


@router.patch("/{user_id}")
def update_cart(
    user_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart = cart_service.update_cart(session, user_id, data)
    return envelope(True, message="Cart updated", data=format_cart(cart))


@router.delete("/{user_id}")
def clear_cart(
    user_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart_service.clear_cart(session, user_id)
    return envelope(True, message="Cart cleared")


# Cart items

@router.post("/{user_id}/items")
def add_to_cart(
    user_id: int,
    data: CartAddRequest,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart = cart_service.add_item(session, user_id, data)
    return envelope(True, message="Added to cart", data=format_cart(cart))


@router.patch("/{user_id}/items/{item_id}")
def update_cart_item(
    user_id: int,
    item_id: int,
    data: CartItemUpdateRequest,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart = cart_service.update_item(session, user_id, item_id, data)
    return envelope(True, message="Cart item updated", data=format_cart(cart))


@router.delete("/{user_id}/items/{item_id}")
def remove_cart_item(
    user_id: int,
    item_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_cart_access),
):
    cart = cart_service.remove_item(session, user_id, item_id)
    if cart is None:
        return envelope(True, message="Item removed; cart is now empty")
    return envelope(True, message="Item removed from cart", data=format_cart(cart))
