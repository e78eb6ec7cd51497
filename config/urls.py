from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("users.urls")),
    path("api/", include("customers.urls")),
    path("api/", include("booking.urls")),
    path("api/", include("payments.urls")),
    path("api/", include("commissions.urls")),
    path("api/", include("leads.urls")),
]
