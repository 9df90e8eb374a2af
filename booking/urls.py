from django.urls import include, path
from rest_framework.routers import DefaultRouter

from booking.views import (
    BookingViewSet,
    CurrentDraftView,
    DraftCheckoutView,
    DraftScreenView,
    DraftView,
)

router = DefaultRouter()
router.register("booking", BookingViewSet, basename="booking")

urlpatterns = [
    path("drafts/", DraftView.as_view(), name="draft-create"),
    path("drafts/cars/<int:car_id>/", DraftScreenView.as_view(), name="draft-screen"),
    path("drafts/current/", CurrentDraftView.as_view(), name="draft-current"),
    path(
        "drafts/current/checkout/",
        DraftCheckoutView.as_view(),
        name="draft-checkout",
    ),
    path("", include(router.urls)),
]

app_name = "booking"
