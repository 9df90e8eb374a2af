from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/user/", include(("customer.urls", "customer"), namespace="customer")),
    path("api/bookings/", include("booking.urls", namespace="booking")),
    path("api/", include(("car.urls", "car"), namespace="car")),
    path("api/payments/", include("payment.urls", namespace="payments")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/schema/swagger-ui/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
]
