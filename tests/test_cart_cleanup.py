from sqlmodel import select

from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.services.cart_cleanup import cleanup_cart_after_order


def _second_product(session):
    product = Product(
        product_id="SKU-2002",
        name="Sun Cream",
        price=18000,
        category="skincare",
        image="https://images.example.com/sun.jpg",
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def test_partial_purchase_prunes_items(session, customer, product, make_cart):
    other = _second_product(session)
    cart = make_cart(customer, [(product, 2), (other, 1)])
    bought, kept = cart.items

    cleanup_cart_after_order(session, cart.id, [bought.id], customer)

    session.expire_all()
    cart = session.get(Cart, cart.id)
    assert [item.id for item in cart.items] == [kept.id]
    assert cart.status == "ordered"


def test_full_purchase_deletes_cart(session, customer, product, make_cart):
    other = _second_product(session)
    cart = make_cart(customer, [(product, 2), (other, 1)])
    ids = [str(item.id) for item in cart.items]
    cart_id = cart.id

    cleanup_cart_after_order(session, cart_id, ids, customer)

    session.expire_all()
    assert session.get(Cart, cart_id) is None
    assert session.exec(select(CartItem)).all() == []


def test_no_item_ids_deletes_cart(session, customer, product, make_cart):
    cart = make_cart(customer, [(product, 1)])
    cart_id = cart.id

    cleanup_cart_after_order(session, cart_id, [], customer)

    session.expire_all()
    assert session.get(Cart, cart_id) is None


def test_running_twice_is_a_no_op(session, customer, product, make_cart):
    other = _second_product(session)
    cart = make_cart(customer, [(product, 2), (other, 1)])
    bought, kept = cart.items
    bought_id = bought.id

    cleanup_cart_after_order(session, cart.id, [bought_id], customer)
    cleanup_cart_after_order(session, cart.id, [bought_id], customer)

    session.expire_all()
    cart = session.get(Cart, cart.id)
    assert cart is not None
    assert [item.id for item in cart.items] == [kept.id]


def test_other_users_cart_is_untouched(session, customer, other_customer, product, make_cart):
    cart = make_cart(other_customer, [(product, 1)])
    item_id = cart.items[0].id

    cleanup_cart_after_order(session, cart.id, [item_id], customer)

    session.expire_all()
    assert session.get(Cart, cart.id) is not None


def test_admin_may_clean_any_cart(session, admin, customer, product, make_cart):
    cart = make_cart(customer, [(product, 1)])
    cart_id = cart.id

    cleanup_cart_after_order(session, cart_id, [cart.items[0].id], admin)

    session.expire_all()
    assert session.get(Cart, cart_id) is None


def test_missing_cart_is_ignored(session, customer):
    cleanup_cart_after_order(session, 9999, ["1"], customer)
    cleanup_cart_after_order(session, None, ["1"], customer)


def test_failures_are_swallowed_and_logged(session, customer, product, make_cart, monkeypatch, caplog):
    cart = make_cart(customer, [(product, 1)])

    def broken_commit():
        raise RuntimeError("database went away")

    monkeypatch.setattr(session, "commit", broken_commit)

    cleanup_cart_after_order(session, cart.id, [cart.items[0].id], customer)

    assert "Cart cleanup failed" in caplog.text
