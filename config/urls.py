from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("django-rq/", include("django_rq.urls")),
    path("accounts/", include("allauth.urls")),
    path("webhooks/", include("reconciliation.urls")),
    # dues ledger and parent notifications
    path("", include("financials.urls")),
    path("", include("notifications.urls")),
]
