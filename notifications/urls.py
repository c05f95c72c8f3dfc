from django.urls import path
from . import views

app_name = "notifications"

urlpatterns = [
    path("messages/", views.MessageListCreateView.as_view(), name="messages"),
    path("messages/<int:pk>/resend/", views.MessageResendView.as_view(), name="resend"),
]
