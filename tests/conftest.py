"""
Pytest configuration and shared fixtures for the barbershop backend tests.

Each test gets a fresh app on an in-memory SQLite database. The fixture keeps
an app context pushed for the whole test, so requests made through the test
client share the same scoped session as the fixtures.
"""

from decimal import Decimal

import pytest

from barbershop.extensions import db as database
from barbershop.models import Barber, Base, Client, Service, User
from barbershop.services.tenancy import resolve_tenant
from barbershop.utils.security import create_access_token, hash_password
from main import create_app

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SECRET_KEY": "test-secret-key-for-testing-only-0123456789",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)

    with app.app_context():
        Base.metadata.create_all(bind=database.engine)
        yield app
        database.session.remove()
        Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    return database.session


def make_owner(session, email, first_name="Owner"):
    user = User(
        email=email,
        password_hash=hash_password("password123"),
        first_name=first_name,
        role="owner",
    )
    session.add(user)
    session.commit()
    return user


def bearer(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def owner(db_session):
    return make_owner(db_session, "owner@example.com", first_name="Teixeira")


@pytest.fixture
def auth_headers(owner):
    return bearer(owner)


@pytest.fixture
def shop(db_session, owner):
    """The owner's barbershop, reachable publicly as 'teixeira'."""
    shop = resolve_tenant(owner)
    shop.slug = "teixeira"
    db_session.commit()
    return shop


@pytest.fixture
def barber(db_session, shop):
    barber = Barber(barbershop_id=shop.id, name="Jean")
    db_session.add(barber)
    db_session.commit()
    return barber


@pytest.fixture
def service(db_session, shop):
    service = Service(
        barbershop_id=shop.id, name="Corte", price=Decimal("55.00"), duration=30
    )
    db_session.add(service)
    db_session.commit()
    return service


@pytest.fixture
def customer(db_session, shop):
    customer = Client(barbershop_id=shop.id, name="Carlos Lima", phone="11999990000")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture
def other_shop(db_session):
    """A second tenant with its own barber and service."""
    other = make_owner(db_session, "rival@example.com", first_name="Rival")
    shop = resolve_tenant(other)
    barber = Barber(barbershop_id=shop.id, name="Rui")
    service = Service(
        barbershop_id=shop.id, name="Barba", price=Decimal("30.00"), duration=20
    )
    db_session.add_all([barber, service])
    db_session.commit()
    return {"owner": other, "shop": shop, "barber": barber, "service": service}


@pytest.fixture
def owner_factory(db_session):
    def factory(email, first_name="Owner"):
        return make_owner(db_session, email, first_name=first_name)

    return factory
