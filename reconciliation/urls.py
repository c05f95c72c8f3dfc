from django.urls import path
from . import views

app_name = "reconciliation"

urlpatterns = [
    path("payment-provider/", views.payment_provider_webhook, name="payment_provider"),
]
