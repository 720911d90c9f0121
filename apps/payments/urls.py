from django.urls import path

from .views import (
    OzowCheckoutView,
    OzowNotifyView,
    OzowRedirectView,
    OzowVerifyView,
    PayFastCheckoutView,
    PayFastITNView,
    PaymentStatusView,
)

urlpatterns = [
    path("ozow/create/", OzowCheckoutView.as_view(), name="ozow-create"),
    path("ozow/redirect/", OzowRedirectView.as_view(), name="ozow-redirect"),
    path("ozow/notify/", OzowNotifyView.as_view(), name="ozow-notify"),
    path("ozow/verify/<str:reference>/", OzowVerifyView.as_view(), name="ozow-verify"),
    path("payfast/create/", PayFastCheckoutView.as_view(), name="payfast-create"),
    path("payfast/itn/", PayFastITNView.as_view(), name="payfast-itn"),
    path("status/<str:reference>/", PaymentStatusView.as_view(), name="payment-status"),
]
