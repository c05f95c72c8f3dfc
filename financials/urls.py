from django.urls import path
from . import views

app_name = "financials"

urlpatterns = [
    path("payments/", views.PaymentListCreateView.as_view(), name="payments"),
    path(
        "payments/<int:pk>/checkout-session/",
        views.CheckoutSessionView.as_view(),
        name="checkout_session",
    ),
]
