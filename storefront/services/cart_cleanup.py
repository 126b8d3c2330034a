import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlmodel import Session

from storefront.constants.order_status import CartStatus
from storefront.models.cart import Cart
from storefront.models.user import User

logger = logging.getLogger(__name__)


def cleanup_cart_after_order(
    session: Session,
    cart_id: Optional[int],
    purchased_item_ids: Iterable,
    acting_user: Optional[User],
) -> None:
    """
    Drop purchased lines from the originating cart once the order is committed.

    Best effort: failures are logged and never reach the caller, since the
    order is already the source of truth.
    """
    if not cart_id:
        return

    try:
        cart = session.get(Cart, cart_id)
        if cart is None:
            return

        if acting_user is None or (not acting_user.is_admin and cart.user_id != acting_user.id):
            return

        target_ids = {str(item_id) for item_id in purchased_item_ids if item_id}

        if not cart.items or not target_ids:
            session.delete(cart)
            session.commit()
            logger.info(f"Cart {cart_id} deleted after order")
            return

        purchased = [item for item in cart.items if str(item.id) in target_ids]
        if not purchased:
            # already pruned by an earlier run
            return

        if len(purchased) == len(cart.items):
            session.delete(cart)
            session.commit()
            logger.info(f"Cart {cart_id} deleted after order")
            return

        for item in purchased:
            cart.items.remove(item)

        cart.status = CartStatus.ordered.value
        cart.updated_at = datetime.utcnow()
        session.add(cart)
        session.commit()
        logger.info(f"Removed {len(purchased)} ordered item(s) from cart {cart_id}")

    except Exception:
        session.rollback()
        logger.exception(f"Cart cleanup failed for cart {cart_id}")
