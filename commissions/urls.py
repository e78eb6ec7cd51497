from rest_framework.routers import DefaultRouter

from .views import CommissionViewSet

router = DefaultRouter()
router.register("commissions", CommissionViewSet, basename="commission")

urlpatterns = router.urls
