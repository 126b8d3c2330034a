from typing import Any

from fastapi import Request

from storefront.errors import ValidationError

REQUIRED_ADDRESS_FIELDS = ("recipient_name", "recipient_phone", "postal_code", "address_line1")


def validate_order_submission(payload: Any) -> dict:
    """Reject submissions that are structurally incomplete.

    Item contents are checked later by the order service; this only makes
    sure there is something to order and somewhere to ship it.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Order payload must be a JSON object")

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("An order requires at least one item")

    address = payload.get("shipping_address")
    if not isinstance(address, dict) or any(
        not address.get(field) for field in REQUIRED_ADDRESS_FIELDS
    ):
        raise ValidationError("Shipping address is incomplete")

    return payload


async def validated_order_payload(request: Request) -> dict:
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    return validate_order_submission(payload)
