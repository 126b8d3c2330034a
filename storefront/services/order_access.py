from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from storefront.models.order import Order
from storefront.models.user import User
from storefront.schemas.order_schemas import AdminOrderPatch, OwnerOrderPatch
from storefront.services.order_history import record_status_change

_NOT_ASSIGNABLE = {"status", "status_memo"}


def is_admin(user: Optional[User]) -> bool:
    return bool(user) and user.is_admin


def can_access(order: Optional[Order], user: Optional[User]) -> bool:
    if order is None or user is None:
        return False
    return is_admin(user) or order.user_id == user.id


def parse_order_patch(data: dict, user: User) -> Union[AdminOrderPatch, OwnerOrderPatch]:
    """Build the update command allowed for the caller's role.

    Owners get ``OwnerOrderPatch``; any field outside it (``status``
    included) is dropped, not rejected.
    """
    if is_admin(user):
        return AdminOrderPatch.model_validate(data)
    return OwnerOrderPatch.model_validate(data)


def apply_order_patch(
    order: Order,
    patch: Union[AdminOrderPatch, OwnerOrderPatch],
    caller: User,
) -> Order:
    # nested models are stored whole, defaults included
    for field in sorted(patch.model_fields_set - _NOT_ASSIGNABLE):
        value = getattr(patch, field)
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        elif isinstance(value, Enum):
            value = value.value
        setattr(order, field, value)

    new_status = getattr(patch, "status", None)
    if new_status is not None:
        record_status_change(
            order,
            new_status.value,
            actor_id=caller.id,
            memo=getattr(patch, "status_memo", None),
        )

    order.updated_at = datetime.utcnow()
    return order
