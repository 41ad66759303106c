"""Checkout URL configuration."""

from django.urls import path

from modules.checkout.views import CreateOrderView, QuoteView

urlpatterns = [
    path("checkout/quote/", QuoteView.as_view(), name="checkout-quote"),
    path("checkout/create/", CreateOrderView.as_view(), name="checkout-create"),
]
