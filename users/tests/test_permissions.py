import pytest
from django.contrib.auth.models import AnonymousUser
from django.urls import reverse

from permissions import can_act_as_owner_or_elevated, has_capability
from users.models import User

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "role, capability, allowed",
    [
        (User.Role.SUPER_ADMIN, "can_delete_any_booking", True),
        (User.Role.ADMIN, "can_delete_any_booking", False),
        (User.Role.ADMIN, "can_approve_commissions", True),
        (User.Role.SENIOR_AGENT, "can_process_refunds", True),
        (User.Role.SENIOR_AGENT, "can_view_all_bookings", False),
        (User.Role.AGENT, "can_process_refunds", False),
        (User.Role.JUNIOR_AGENT, "can_view_all_customers", False),
    ],
)
def test_role_capabilities(role, capability, allowed):
    user = User.objects.create_user(username=f"u-{role}", password="pass", role=role)
    assert has_capability(user, capability) is allowed


def test_superuser_has_every_capability():
    root = User.objects.create_superuser(username="root", password="pass", email="root@example.com")
    assert has_capability(root, "can_delete_any_booking")


def test_anonymous_has_nothing():
    assert not has_capability(AnonymousUser(), "can_view_all_bookings")


@pytest.mark.parametrize(
    "actor_id, can_view_all, owner_id, allowed",
    [(1, False, 1, True), (2, False, 1, False), (2, True, 1, True), (None, False, 1, False)],
)
def test_owner_or_elevated(actor_id, can_view_all, owner_id, allowed):
    assert can_act_as_owner_or_elevated(actor_id, can_view_all, owner_id) is allowed


def test_me_endpoint_hides_earnings_from_edits(agent, api_client):
    api_client.force_authenticate(agent)

    response = api_client.patch(
        reverse("me"), {"agency_name": "Sunrise Travels", "total_earnings": "999.00"}, format="json"
    )

    assert response.status_code == 200, response.data
    agent.refresh_from_db()
    assert agent.agency_name == "Sunrise Travels"
    assert agent.total_earnings == 0
