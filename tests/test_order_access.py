from datetime import datetime

from storefront.models.order import Order
from storefront.schemas.order_schemas import AdminOrderPatch, OwnerOrderPatch
from storefront.services.order_access import apply_order_patch, can_access, parse_order_patch
from storefront.services.order_history import history_entry, record_status_change


def _order(user_id, status="paid"):
    return Order(
        id=1,
        order_id="ORD-1",
        user_id=user_id,
        status=status,
        status_history=[history_entry(status, user_id)],
        sub_total=1000,
        total_amount=1000,
        items=[],
        shipping_address={"recipient_name": "Kim"},
    )


def test_owner_and_admin_can_access(customer, other_customer, admin):
    order = _order(customer.id)

    assert can_access(order, customer)
    assert can_access(order, admin)
    assert not can_access(order, other_customer)
    assert not can_access(order, None)
    assert not can_access(None, admin)


def test_owner_patch_drops_privileged_fields(customer):
    patch = parse_order_patch(
        {"memo": "leave at door", "status": "delivered", "admin_note": "vip", "total_amount": 1},
        customer,
    )

    assert type(patch) is OwnerOrderPatch
    assert patch.model_dump(exclude_unset=True) == {"memo": "leave at door"}


def test_admin_gets_full_patch(admin):
    patch = parse_order_patch({"status": "shipped", "tracking_number": "CJ123"}, admin)

    assert isinstance(patch, AdminOrderPatch)
    assert patch.tracking_number == "CJ123"


def test_owner_patch_never_changes_status(customer):
    order = _order(customer.id)
    patch = parse_order_patch({"status": "delivered", "delivery_note": "knock twice"}, customer)

    apply_order_patch(order, patch, customer)

    assert order.status == "paid"
    assert order.delivery_note == "knock twice"
    assert len(order.status_history) == 1


def test_admin_status_change_appends_history(admin, customer):
    order = _order(customer.id)
    patch = parse_order_patch(
        {"status": "shipped", "status_memo": "handed to courier", "shipping_status": "shipped"},
        admin,
    )

    apply_order_patch(order, patch, admin)

    assert order.status == "shipped"
    assert order.shipping_status == "shipped"
    assert [entry["status"] for entry in order.status_history] == ["paid", "shipped"]
    assert order.status_history[-1]["changed_by"] == admin.id
    assert order.status_history[-1]["memo"] == "handed to courier"


def test_admin_patch_stores_full_refund(admin, customer):
    order = _order(customer.id)
    patch = parse_order_patch(
        {"refund": {"amount": 500, "reason": "damaged", "refunded_at": "2026-02-01T10:00:00"}},
        admin,
    )

    apply_order_patch(order, patch, admin)

    assert order.refund == {
        "amount": 500.0,
        "reason": "damaged",
        "refunded_at": "2026-02-01T10:00:00",
        "transaction_id": None,
    }


def test_owner_address_patch_keeps_defaults(customer):
    order = _order(customer.id)
    patch = parse_order_patch(
        {
            "shipping_address": {
                "recipient_name": "Kim",
                "recipient_phone": "010-9999-0000",
                "postal_code": "06236",
                "address_line1": "152 Teheran-ro",
            }
        },
        customer,
    )

    apply_order_patch(order, patch, customer)

    assert order.shipping_address == {
        "recipient_name": "Kim",
        "recipient_phone": "010-9999-0000",
        "postal_code": "06236",
        "address_line1": "152 Teheran-ro",
        "address_line2": None,
        "city": None,
        "state": None,
        "country": "KR",
    }


def test_same_status_is_not_recorded(admin):
    order = _order(admin.id, status="paid")

    assert record_status_change(order, "paid", admin.id) is False
    assert len(order.status_history) == 1


def test_status_change_replaces_history_list(admin):
    order = _order(admin.id)
    before = order.status_history

    assert record_status_change(order, "cancelled", admin.id, memo="customer request")

    assert order.status_history is not before
    assert before == [order.status_history[0]]


def test_history_entry_shape():
    entry = history_entry("paid", 7)

    assert entry["status"] == "paid"
    assert entry["changed_by"] == 7
    assert "memo" not in entry
    datetime.fromisoformat(entry["changed_at"])
