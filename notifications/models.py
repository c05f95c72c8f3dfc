from django.db import models


class Channel(models.TextChoices):
    SMS = "SMS", "SMS"
    WHATSAPP = "WHATSAPP", "WhatsApp"
    EMAIL = "EMAIL", "E-mail"


class MessageStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    SENT = "SENT", "Sent"
    FAILED = "FAILED", "Failed"


class Message(models.Model):
    """One delivery attempt to a student's parent. Never deleted or retried in place."""

    student = models.ForeignKey("students.Student", on_delete=models.CASCADE, related_name="messages")
    parent = models.ForeignKey("accounts.User", on_delete=models.CASCADE, related_name="messages_received")
    channel = models.CharField(max_length=16, choices=Channel.choices)
    content = models.TextField()
    status = models.CharField(max_length=16, choices=MessageStatus.choices, default=MessageStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    provider_id = models.CharField(max_length=128, blank=True, null=True)
    error = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
