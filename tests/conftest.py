import os

os.environ["SQLALCHEMY_DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
# never reach the real payment provider from tests
os.environ["IAMPORT_API_KEY"] = ""
os.environ["IAMPORT_API_SECRET"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from storefront.database import engine
from storefront.errors import GatewayError
from storefront.main import app
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services.payment_gateway import PaymentRecord, get_payment_gateway
from storefront.utils.hash import hash_password
from storefront.utils.token import create_access_token


class FakeGateway:
    """In-memory stand-in for the payment provider."""

    def __init__(self):
        self.payments = {}
        self.calls = []
        self.error = None

    def add_payment(self, imp_uid, merchant_uid, amount, status="paid", pay_method="card", **extra):
        self.payments[imp_uid] = {
            "imp_uid": imp_uid,
            "merchant_uid": merchant_uid,
            "amount": amount,
            "status": status,
            "pay_method": pay_method,
            "pg_provider": "html5_inicis",
            "pg_tid": f"pg_{imp_uid}",
            "receipt_url": f"https://receipts.example.com/{imp_uid}",
            "paid_at": 1767225600,
            "currency": "KRW",
            **extra,
        }

    def fetch_payment(self, transaction_id):
        self.calls.append(transaction_id)
        if self.error is not None:
            raise self.error
        if transaction_id not in self.payments:
            raise GatewayError("Payment not found", provider_status=404, response={"code": -1})
        return PaymentRecord.from_response(self.payments[transaction_id])


@pytest.fixture(autouse=True)
def tables():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture()
def make_user(session):
    def _make(email, name="Test User", user_type="customer", password="secret123"):
        user = User(
            email=email,
            name=name,
            password=hash_password(password),
            user_type=user_type,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def customer(make_user):
    return make_user("customer@example.com", name="Kim Customer")


@pytest.fixture()
def other_customer(make_user):
    return make_user("other@example.com", name="Lee Other")


@pytest.fixture()
def admin(make_user):
    return make_user("admin@example.com", name="Park Admin", user_type="admin")


@pytest.fixture()
def product(session):
    product = Product(
        product_id="SKU-1001",
        name="Hydrating Toner",
        price=25000,
        category="skincare",
        image="https://images.example.com/toner.jpg",
        brand="Glow Lab",
        description="Alcohol-free daily toner",
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture()
def make_cart(session):
    def _make(user, products_and_quantities):
        cart = Cart(user_id=user.id)
        for product, quantity in products_and_quantities:
            cart.items.append(CartItem(product_id=product.id, quantity=quantity, price=product.price))
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart

    return _make


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture()
def client():
    return TestClient(app)


def auth_headers(user):
    token = create_access_token({"user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


def order_payload(product, **overrides):
    payload = {
        "order_id": "ORD-TEST-0001",
        "items": [
            {"product": product.id, "quantity": 2, "unit_price": 25000},
        ],
        "shipping_address": {
            "recipient_name": "Kim Customer",
            "recipient_phone": "010-1234-5678",
            "postal_code": "04524",
            "address_line1": "110 Sejong-daero",
        },
        "payment": {
            "imp_uid": "imp_100001",
            "merchant_uid": "ORD-TEST-0001",
            "method": "card",
        },
        "sub_total": 50000,
        "shipping_fee": 0,
    }
    payload.update(overrides)
    return payload
