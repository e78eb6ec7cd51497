from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from customers.models import Customer
from users.models import User


class CustomerAPITests(APITestCase):
    def setUp(self):
        self.agent = User.objects.create_user(username="agent", password="pass", role=User.Role.AGENT)
        self.other = User.objects.create_user(username="other", password="pass", role=User.Role.AGENT)
        self.customer = Customer.objects.create(
            agent=self.agent, first_name="Asha", last_name="Rao", email="asha@example.com", phone="1"
        )
        Customer.objects.create(agent=self.other, first_name="Ben", last_name="Ng", email="ben@example.com", phone="2")
        self.client.force_authenticate(self.agent)

    def test_agent_lists_only_own_customers(self):
        response = self.client.get(reverse("customer-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c["id"] for c in response.data["results"]], [self.customer.pk])

    def test_create_assigns_agent_and_rejects_duplicate_email(self):
        payload = {"first_name": "Cara", "last_name": "Li", "email": "cara@example.com", "phone": "3"}
        response = self.client.post(reverse("customer-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Customer.objects.get(email="cara@example.com").agent, self.agent)

        response = self.client.post(reverse("customer-list"), {**payload, "email": "ASHA@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_is_soft(self):
        response = self.client.delete(reverse("customer-detail", args=[self.customer.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.customer.refresh_from_db()
        self.assertFalse(self.customer.is_active)
