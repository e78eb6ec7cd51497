from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from booking.models import Booking
from leads.models import Lead
from users.models import User


class LeadAPITests(APITestCase):
    def setUp(self):
        self.agent = User.objects.create_user(username="agent", password="pass", role=User.Role.AGENT)
        self.other = User.objects.create_user(username="other", password="pass", role=User.Role.AGENT)
        self.admin = User.objects.create_user(username="boss", password="pass", role=User.Role.ADMIN)
        self.client.force_authenticate(self.agent)
        response = self.client.post(
            reverse("lead-list"),
            {
                "first_name": "Asha",
                "last_name": "Rao",
                "email": "asha@example.com",
                "phone": "+15550100",
                "destination": "Goa",
                "start_date": "2030-03-10",
                "end_date": "2030-03-15",
                "source": "website",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.lead_id = response.data["id"]

    def test_list_is_scoped(self):
        self.assertEqual(self.client.get(reverse("lead-list")).data["count"], 1)

        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.get(reverse("lead-list")).data["count"], 0)
        response = self.client.get(reverse("lead-detail", args=[self.lead_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(reverse("lead-list")).data["count"], 1)

    def test_convert_returns_lead_and_booking(self):
        response = self.client.post(
            reverse("lead-convert", args=[self.lead_id]), {"base_price": "900.00"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["lead"]["status"], Lead.Status.CONVERTED)
        self.assertEqual(response.data["booking"]["status"], Booking.Status.PENDING)
        self.assertEqual(response.data["booking"]["total_amount"], "900.00")
        self.assertEqual(response.data["lead"]["converted_booking_reference"], response.data["booking"]["reference"])

        response = self.client.post(reverse("lead-convert", args=[self.lead_id]), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_state")

    def test_editing_to_converted_is_rejected(self):
        response = self.client.patch(
            reverse("lead-detail", args=[self.lead_id]), {"status": "converted"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stats(self):
        response = self.client.get(reverse("lead-stats"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["conversion_rate"]["total"], 1)

    def test_non_numeric_id_is_404(self):
        response = self.client.post("/api/leads/abc/convert/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
