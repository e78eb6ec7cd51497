from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from booking.services import create_booking
from customers.models import Customer
from users.models import User


@pytest.fixture
def agent(db):
    return User.objects.create_user(
        username="agent", password="pass", email="agent@example.com", role=User.Role.AGENT
    )


@pytest.fixture
def other_agent(db):
    return User.objects.create_user(
        username="other", password="pass", email="other@example.com", role=User.Role.AGENT
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username="boss", password="pass", email="boss@example.com", role=User.Role.ADMIN
    )


@pytest.fixture
def customer(agent):
    return Customer.objects.create(
        agent=agent, first_name="Asha", last_name="Rao", email="asha@example.com", phone="+15550100"
    )


@pytest.fixture
def booking_data(customer):
    return {
        "customer": customer,
        "title": "Goa getaway",
        "destination": "Goa",
        "start_date": date(2030, 3, 10),
        "end_date": date(2030, 3, 15),
        "base_price": Decimal("1000.00"),
        "taxes": Decimal("100.00"),
        "service_charge": Decimal("0.00"),
        "discount": Decimal("50.00"),
    }


@pytest.fixture
def make_booking(agent, booking_data):
    def _make(**overrides):
        return create_booking({**booking_data, **overrides}, agent)
    return _make


@pytest.fixture
def booking(make_booking):
    return make_booking()


@pytest.fixture
def api_client():
    return APIClient()
