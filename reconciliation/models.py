from django.db import models


class ProcessedEvent(models.Model):
    """Marks a provider event id as already applied. Nothing else is kept."""

    event_id = models.CharField(max_length=255, unique=True)
    received_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.event_id
