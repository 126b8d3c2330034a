from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session, select

from storefront.database import get_session
from storefront.errors import AuthorizationError, ValidationError, envelope
from storefront.models.order import Order
from storefront.models.user import User
from storefront.schemas.order_schemas import AdminOrderPatch, OrderCreate
from storefront.services.order_access import apply_order_patch, can_access, is_admin, parse_order_patch
from storefront.services.order_service import (
    create_order,
    get_order_or_404,
    serialize_order,
    serialize_orders,
)
from storefront.services.order_validator import validated_order_payload
from storefront.services.payment_gateway import IamportClient, get_payment_gateway
from storefront.utils.pagination import paginate
from storefront.utils.token import get_current_admin, get_current_user

router = APIRouter()


def _parse(build, data: dict):
    try:
        return build(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"{location}: {first['msg']}")


@router.get("")
def list_orders(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    user_id: Optional[int] = Query(None, alias="userId"),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    query = select(Order)

    if not is_admin(current_user):
        query = query.where(Order.user_id == current_user.id)
    elif user_id is not None:
        query = query.where(Order.user_id == user_id)

    if status:
        query = query.where(Order.status == status)

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)
    orders = data.pop("results")

    return {
        "success": True,
        **data,
        "data": serialize_orders(session, orders),
    }


@router.get("/{order_id}")
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order_or_404(session, order_id)

    if not can_access(order, current_user):
        raise AuthorizationError("You do not have access to this order")

    return envelope(True, data=serialize_order(session, order))


@router.post("", status_code=201)
def create_order_endpoint(
    current_user: User = Depends(get_current_user),
    payload: dict = Depends(validated_order_payload),
    session: Session = Depends(get_session),
    gateway: IamportClient = Depends(get_payment_gateway),
):
    draft = _parse(OrderCreate.model_validate, payload)
    order = create_order(session, draft, current_user, gateway)

    return envelope(
        True,
        message="Order created successfully",
        data=serialize_order(session, order),
    )


@router.put("/{order_id}")
def update_order(
    order_id: int,
    payload: dict = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order_or_404(session, order_id)

    if not is_admin(current_user):
        raise AuthorizationError("You do not have permission to update this order")

    apply_order_patch(order, _parse(AdminOrderPatch.model_validate, payload), current_user)
    session.add(order)
    session.commit()
    session.refresh(order)

    return envelope(
        True,
        message="Order updated successfully",
        data=serialize_order(session, order),
    )


@router.patch("/{order_id}")
def patch_order(
    order_id: int,
    payload: dict = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_order_or_404(session, order_id)

    if not can_access(order, current_user):
        raise AuthorizationError("You do not have permission to update this order")

    patch = _parse(lambda data: parse_order_patch(data, current_user), payload)

    apply_order_patch(order, patch, current_user)
    session.add(order)
    session.commit()
    session.refresh(order)

    return envelope(
        True,
        message="Order updated successfully",
        data=serialize_order(session, order),
    )


@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    order = get_order_or_404(session, order_id)
    session.delete(order)
    session.commit()

    return envelope(True, message="Order deleted successfully")
