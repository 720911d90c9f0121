from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import OrderLookupView, PaymentOrderViewSet

router = DefaultRouter()
router.register("", PaymentOrderViewSet, basename="order")

urlpatterns = [
    path("lookup/<str:reference>/", OrderLookupView.as_view(), name="order-lookup"),
] + router.urls
