from rest_framework.routers import DefaultRouter

from car.views import CarViewSet, CategoryViewSet

app_name = "car"

router = DefaultRouter()
router.register("cars", CarViewSet, basename="cars")
router.register("categories", CategoryViewSet, basename="categories")

urlpatterns = router.urls
